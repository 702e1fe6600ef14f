"""LLM pricing utilities.

Per-model token pricing for the OpenAI and Anthropic models the gateway talks to.
Used only to feed the cost counter; an unknown model falls back to a flat rate.
"""

from __future__ import annotations

# Pricing constants ($ per million tokens = MTok)
PRICING = {
    "gpt-4-turbo": {"input": 10.0, "output": 30.0},
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.0},
    "claude-3-5-haiku": {"input": 0.80, "output": 4.0},
    "claude-3-5-sonnet": {"input": 3.0, "output": 15.0},
    "sonnet": {"input": 3.0, "output": 15.0},
    "haiku": {"input": 1.0, "output": 5.0},
}


def _per_token(rate_per_mtok: float) -> float:
    """Convert $/MTok to $/token."""
    return rate_per_mtok / 1_000_000.0


def _pricing_key(model: str) -> str | None:
    model_lower = model.lower()
    # Longest key first so "gpt-4o-mini" wins over "gpt-4o"
    for key in sorted(PRICING, key=len, reverse=True):
        if key in model_lower:
            return key
    return None


def compute_llm_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """Compute USD cost for an LLM call.

    Args:
        model: Model name as reported by the provider.
        input_tokens: Number of prompt tokens.
        output_tokens: Number of completion tokens.

    Returns:
        Total cost in USD (rounded to 6 decimals).
    """
    key = _pricing_key(model)
    if key is None:
        # Unknown model fallback: assume $0.00001 per token each direction
        return round((input_tokens + output_tokens) * 0.00001, 6)

    rates = PRICING[key]
    total = input_tokens * _per_token(rates["input"]) + output_tokens * _per_token(rates["output"])
    return round(total, 6)


__all__ = ["compute_llm_cost"]
