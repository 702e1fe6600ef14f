"""Token counting utilities.

Uses the cl100k_base encoding for compatibility with both providers' rough sizing.
Counts are estimates used for budget warnings, never for control flow.
"""
import tiktoken
from esg_ddq.utils.logging import logger

_tokenizer = tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str) -> int:
    """
    Count tokens in text using tiktoken.

    Args:
        text: Text to count tokens for

    Returns:
        Number of tokens
    """
    if not text:
        return 0
    return len(_tokenizer.encode(text))


def warn_if_over_budget(label: str, text: str, token_budget: int) -> int:
    """Log a warning when an assembled prompt exceeds the configured budget.

    Returns the estimated token count.
    """
    tokens = count_tokens(text)
    if tokens > token_budget:
        logger.warning(
            f"{label} prompt exceeds token budget: {tokens:,} > {token_budget:,}",
            extra={"prompt_label": label, "estimated_tokens": tokens, "token_budget": token_budget}
        )
    else:
        logger.debug(
            f"{label} prompt size: {tokens:,} tokens",
            extra={"prompt_label": label, "estimated_tokens": tokens}
        )
    return tokens
