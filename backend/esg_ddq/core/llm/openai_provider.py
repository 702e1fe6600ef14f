# backend/esg_ddq/core/llm/openai_provider.py
"""OpenAI chat-completions provider."""
import time
from typing import Optional

import openai
from openai import AsyncOpenAI
from httpx import Timeout

from esg_ddq.core.llm.base import LLMProvider, LLMResponse, LLMUsage, ProviderName
from esg_ddq.exceptions import (
    AuthenticationError,
    LLMTimeoutError,
    RateLimitError,
    TransportError,
)
from esg_ddq.utils.logging import logger


class OpenAIProvider(LLMProvider):
    """Chat completions via the OpenAI SDK.

    JSON mode maps to `response_format={"type": "json_object"}`; the gateway
    still runs its own salvage step on the reply.
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
            raise AuthenticationError("OPENAI_API_KEY is not set", provider=self.name)

        timeout = Timeout(timeout=float(timeout_seconds), read=float(timeout_seconds), write=10.0, connect=5.0)
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)
        self._model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds

    @property
    def name(self) -> str:
        return ProviderName.OPENAI.value

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
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        request = {
            "model": self._model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        start = time.time()
        try:
            response = await self.client.chat.completions.create(**request)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise AuthenticationError(
                "LLM API authentication failed. Please check your OPENAI API key.",
                provider=self.name, detail=str(e),
            ) from e
        except openai.RateLimitError as e:
            raise RateLimitError(
                "LLM API rate limit exceeded. Please try again later.",
                provider=self.name, detail=str(e),
            ) from e
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(
                f"LLM API request timed out after {self.timeout_seconds}s. Please try again.",
                provider=self.name,
            ) from e
        except openai.APIError as e:
            raise TransportError(f"OpenAI API call failed: {e}", provider=self.name) from e

        latency_ms = int((time.time() - start) * 1000)
        choice = response.choices[0] if response.choices else None
        content = (choice.message.content if choice and choice.message else None) or ""
        finish_reason = choice.finish_reason if choice else None

        if not content:
            logger.warning(
                "OpenAI API returned empty content",
                extra={"response_id": response.id, "choices": len(response.choices), "finish_reason": finish_reason}
            )

        usage = None
        if response.usage:
            usage = LLMUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
            )

        return LLMResponse(
            content=content,
            provider=self.name,
            model=getattr(response, "model", None) or self._model,
            usage=usage,
            finish_reason=finish_reason,
            latency_ms=latency_ms,
        )
