# backend/esg_ddq/core/llm/base.py
"""Base class for LLM providers"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from enum import Enum


class ProviderName(str, Enum):
    """Available LLM backends"""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant that analyzes ESG compliance for investment companies."


@dataclass
class LLMUsage:
    prompt_tokens: int
    completion_tokens: int


@dataclass
class LLMResponse:
    """Normalized completion returned by every provider"""
    content: str
    provider: str
    model: str
    usage: Optional[LLMUsage] = None
    finish_reason: Optional[str] = None
    latency_ms: int = 0


class LLMProvider(ABC):
    """Chat-completion backend behind the gateway.

    Each provider implementation should:
    1. Send one system + user message pair
    2. Normalize the reply into LLMResponse (content + token usage)
    3. Translate SDK failures into the gateway taxonomy
       (AuthenticationError, RateLimitError, LLMTimeoutError, TransportError)
    """

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Run one completion.

        Args:
            prompt: User message
            system_prompt: Optional system message
            max_tokens: Completion cap (provider default when None)
            temperature: Sampling temperature (provider default when None)
            json_mode: Bias decoding towards a JSON object where the backend supports it

        Raises:
            LLMError subclasses
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g., 'openai', 'anthropic')"""
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """Model used for completions"""
        pass
