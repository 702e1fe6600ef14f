# backend/esg_ddq/core/llm/anthropic_provider.py
"""Anthropic Claude messages provider."""
import time
from typing import Optional

import anthropic
from anthropic import AsyncAnthropic
from httpx import Timeout

from esg_ddq.core.llm.base import (
    DEFAULT_SYSTEM_PROMPT,
    LLMProvider,
    LLMResponse,
    LLMUsage,
    ProviderName,
)
from esg_ddq.exceptions import (
    AuthenticationError,
    LLMTimeoutError,
    RateLimitError,
    TransportError,
)
from esg_ddq.utils.logging import logger


class AnthropicProvider(LLMProvider):
    """Claude messages API.

    JSON mode uses an assistant prefill of "{" and prepends it back onto the
    reply, so the model cannot open with prose.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int,
        temperature: float,
        timeout_seconds: int = 300,
        max_retries: int = 2,
    ):
        if not api_key:
            raise AuthenticationError("ANTHROPIC_API_KEY is not set", provider=self.name)

        # read timeout is the important one for long-running API calls
        timeout = Timeout(timeout=float(timeout_seconds), read=float(timeout_seconds), write=10.0, connect=5.0)
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=max_retries)
        self._model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds

    @property
    def name(self) -> str:
        return ProviderName.ANTHROPIC.value

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        messages = [{"role": "user", "content": prompt}]
        if json_mode:
            messages.append({"role": "assistant", "content": "{"})  # Prefill to force a JSON object

        start = time.time()
        try:
            message = await self.client.messages.create(
                model=self._model,
                max_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature if temperature is None else temperature,
                system=system_prompt or DEFAULT_SYSTEM_PROMPT,
                messages=messages,
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            raise AuthenticationError(
                "LLM API authentication failed. Please check your ANTHROPIC API key.",
                provider=self.name, detail=str(e),
            ) from e
        except anthropic.RateLimitError as e:
            raise RateLimitError(
                "LLM API rate limit exceeded. Please try again later.",
                provider=self.name, detail=str(e),
            ) from e
        except anthropic.APITimeoutError as e:
            raise LLMTimeoutError(
                f"LLM API request timed out after {self.timeout_seconds}s. Please try again.",
                provider=self.name,
            ) from e
        except anthropic.APIError as e:
            raise TransportError(f"Anthropic API call failed: {e}", provider=self.name) from e

        latency_ms = int((time.time() - start) * 1000)
        content = "".join(
            block.text for block in (message.content or []) if getattr(block, "type", None) == "text"
        )
        if json_mode and content:
            content = "{" + content

        stop_reason = getattr(message, "stop_reason", None)
        if stop_reason == "max_tokens":
            logger.warning(
                f"RESPONSE TRUNCATED: Hit max_tokens limit ({max_tokens or self.max_tokens})",
                extra={"provider": self.name, "model": self._model, "response_length": len(content)}
            )

        usage = None
        if getattr(message, "usage", None):
            usage = LLMUsage(
                prompt_tokens=message.usage.input_tokens,
                completion_tokens=message.usage.output_tokens,
            )

        return LLMResponse(
            content=content,
            provider=self.name,
            model=getattr(message, "model", None) or self._model,
            usage=usage,
            finish_reason=stop_reason,
            latency_ms=latency_ms,
        )
