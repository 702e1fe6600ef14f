# backend/esg_ddq/core/llm/gateway.py
"""Uniform call surface over the configured LLM providers.

Responsibilities:
- Resolve a provider by name (default: settings.llm_primary_provider)
- Normalize request/response shape (LLMResponse)
- Token usage, latency and cost accounting
- `call_json`: JSON-only instruction + structured-output salvage

Not responsibilities:
- Retries on rate limits / timeouts (callers decide, errors are typed)
- Schema validation of parsed output (see services.validator)
"""
import time
from typing import Any, Callable, Dict, Optional

from esg_ddq.config import Settings, settings as default_settings
from esg_ddq.core.llm.base import LLMProvider, LLMResponse, ProviderName
from esg_ddq.core.llm.json_extraction import parse_json_response, response_preview
from esg_ddq.exceptions import (
    AuthenticationError,
    ConfigurationError,
    LLMError,
    OutputExtractionError,
)
from esg_ddq.utils.costs import compute_llm_cost
from esg_ddq.utils.logging import logger
from esg_ddq.utils.metrics import (
    LLM_COST_USD,
    LLM_LATENCY_SECONDS,
    LLM_REQUESTS_TOTAL,
    LLM_TOKEN_USAGE,
)

JSON_ONLY_INSTRUCTION = "\n\nRespond with valid JSON only, no markdown formatting."

ProviderFactory = Callable[[Settings], LLMProvider]


def _openai_factory(cfg: Settings) -> LLMProvider:
    from esg_ddq.core.llm.openai_provider import OpenAIProvider
    return OpenAIProvider(
        api_key=cfg.openai_api_key,
        model=cfg.openai_model,
        max_tokens=cfg.llm_max_tokens,
        temperature=cfg.llm_temperature,
        timeout_seconds=cfg.llm_timeout_seconds,
        max_retries=cfg.llm_max_retries,
    )


def _anthropic_factory(cfg: Settings) -> LLMProvider:
    from esg_ddq.core.llm.anthropic_provider import AnthropicProvider
    return AnthropicProvider(
        api_key=cfg.anthropic_api_key,
        model=cfg.anthropic_model,
        max_tokens=cfg.llm_max_tokens,
        temperature=cfg.llm_temperature,
        timeout_seconds=cfg.llm_timeout_seconds,
        max_retries=cfg.llm_max_retries,
    )


PROVIDER_FACTORIES: Dict[str, ProviderFactory] = {
    ProviderName.OPENAI.value: _openai_factory,
    ProviderName.ANTHROPIC.value: _anthropic_factory,
}


class LLMGateway:
    """Polymorphic {call, call_json} capability over named providers.

    Providers are built lazily on first use so a missing key for one backend
    never blocks the other. Tests inject ready-made providers.
    """

    def __init__(
        self,
        cfg: Optional[Settings] = None,
        providers: Optional[Dict[str, LLMProvider]] = None,
    ):
        self.settings = cfg or default_settings
        self._providers: Dict[str, LLMProvider] = dict(providers or {})

    @property
    def default_provider(self) -> str:
        return self.settings.llm_primary_provider

    def get_provider(self, provider: Optional[str] = None) -> LLMProvider:
        name = (provider or self.default_provider).lower()
        if name in self._providers:
            return self._providers[name]

        factory = PROVIDER_FACTORIES.get(name)
        if factory is None:
            raise ConfigurationError(
                f"Unknown LLM provider '{name}'. Supported: {list(PROVIDER_FACTORIES.keys())}"
            )
        if not self.settings.api_key_for(name):
            raise AuthenticationError(f"{name.upper()}_API_KEY is not set", provider=name)

        self._providers[name] = factory(self.settings)
        logger.info(f"LLM provider initialized: {name}", extra={"provider": name, "model": self._providers[name].model})
        return self._providers[name]

    async def call(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        provider: Optional[str] = None,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send one prompt and return the normalized response.

        Raises:
            AuthenticationError: no credential for the selected provider, or rejected credential
            RateLimitError / LLMTimeoutError / TransportError: provider failures
        """
        backend = self.get_provider(provider)
        request_info = {
            "provider": backend.name,
            "model": backend.model,
            "prompt_length": len(prompt),
            "system_prompt_length": len(system_prompt or ""),
        }
        logger.info(f"Starting {backend.name} API call", extra=request_info)

        start = time.time()
        try:
            response = await backend.complete(
                prompt,
                system_prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                json_mode=json_mode,
            )
        except LLMError as e:
            elapsed = time.time() - start
            LLM_REQUESTS_TOTAL.labels(provider=backend.name, model=backend.model, outcome=type(e).__name__).inc()
            LLM_LATENCY_SECONDS.labels(provider=backend.name).observe(elapsed)
            logger.error(
                f"LLM API call failed: {e}",
                extra={**request_info, "error_type": type(e).__name__, "response_time_ms": int(elapsed * 1000)}
            )
            raise

        elapsed = time.time() - start
        LLM_LATENCY_SECONDS.labels(provider=backend.name).observe(elapsed)
        self._record_usage(response)

        logger.info(
            f"{backend.name} API call successful in {int(elapsed * 1000)}ms",
            extra={
                **request_info,
                "response_length": len(response.content),
                "prompt_tokens": response.usage.prompt_tokens if response.usage else None,
                "completion_tokens": response.usage.completion_tokens if response.usage else None,
                "finish_reason": response.finish_reason,
            }
        )
        return response

    async def call_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        provider: Optional[str] = None,
        *,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Call the LLM and parse its reply as a single JSON object.

        No schema validation happens here; callers own that.

        Raises:
            EmptyResponseError: blank reply
            MalformedJSONError: reply still unparseable after fence-strip + brace-span salvage
            LLMError subclasses: as for `call`
        """
        start = time.time()
        response = await self.call(
            f"{prompt}{JSON_ONLY_INSTRUCTION}",
            system_prompt,
            provider,
            max_tokens=max_tokens,
            json_mode=True,
        )

        try:
            parsed = parse_json_response(response.content)
        except OutputExtractionError as e:
            e.context.update({"provider": response.provider, "model": response.model})
            logger.error(
                f"JSON extraction failed: {e}",
                extra={
                    "provider": response.provider,
                    "response_length": len(response.content or ""),
                    "response_preview": response_preview(response.content or ""),
                    "error_type": type(e).__name__,
                }
            )
            raise

        logger.info(
            f"Successfully parsed JSON response in {int((time.time() - start) * 1000)}ms",
            extra={
                "provider": response.provider,
                "response_length": len(response.content),
                "parsed_keys": list(parsed.keys()),
            }
        )
        return parsed

    @staticmethod
    def _record_usage(response: LLMResponse) -> None:
        LLM_REQUESTS_TOTAL.labels(provider=response.provider, model=response.model, outcome="success").inc()
        if not response.usage:
            return
        LLM_TOKEN_USAGE.labels(provider=response.provider, model=response.model, token_type="input").inc(
            response.usage.prompt_tokens
        )
        LLM_TOKEN_USAGE.labels(provider=response.provider, model=response.model, token_type="output").inc(
            response.usage.completion_tokens
        )
        cost = compute_llm_cost(response.model, response.usage.prompt_tokens, response.usage.completion_tokens)
        if cost:
            LLM_COST_USD.labels(provider=response.provider, model=response.model).inc(cost)


_gateway: Optional[LLMGateway] = None


def get_llm_gateway() -> LLMGateway:
    """Process-wide gateway built from global settings."""
    global _gateway
    if _gateway is None:
        _gateway = LLMGateway()
    return _gateway
