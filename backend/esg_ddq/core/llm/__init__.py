"""LLM gateway over the configured providers."""
from esg_ddq.core.llm.base import LLMProvider, LLMResponse, LLMUsage, ProviderName
from esg_ddq.core.llm.gateway import LLMGateway, get_llm_gateway

__all__ = ["LLMProvider", "LLMResponse", "LLMUsage", "ProviderName", "LLMGateway", "get_llm_gateway"]
