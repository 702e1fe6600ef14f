# backend/esg_ddq/exceptions.py
"""Typed errors raised across the assessment pipeline.

Hierarchy:
- ESGPipelineError
    - ConfigurationError            no usable LLM credential
    - KnowledgeBaseUnavailable      framework text could not be loaded
    - EvidenceQueryFailure          one knowledge-search query failed (logged, never raised past the gatherer)
    - LLMError                      gateway transport failures
        - AuthenticationError
        - RateLimitError
        - LLMTimeoutError
        - TransportError
    - OutputExtractionError         raw LLM text could not be turned into data
        - EmptyResponseError
        - MalformedJSONError
    - SchemaMismatch                parsed data does not match the rubric
    - ValidationIncomplete          company profile still missing fields after retries
    - MissingDDQResultError         IM requested without a completed DDQ
    - DocumentExtractionError       upload could not be turned into text
        - UnsupportedDocumentError
        - EmptyDocumentError
        - EncryptedDocumentError
        - CorruptedDocumentError
        - DocumentTimeoutError

Every error carries a `context` dict (company, stage, provider, preview...) so the
API layer can log it without re-running the request.
"""
from typing import Any, Dict, List, Optional


class ESGPipelineError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(ESGPipelineError):
    pass


class KnowledgeBaseUnavailable(ESGPipelineError):
    pass


class EvidenceQueryFailure(ESGPipelineError):
    def __init__(self, message: str, company_name: str, query: str, **context: Any):
        super().__init__(message, company_name=company_name, query=query, **context)
        self.company_name = company_name
        self.query = query


# ---------- LLM gateway ----------

class LLMError(ESGPipelineError):
    def __init__(self, message: str, provider: Optional[str] = None, **context: Any):
        super().__init__(message, provider=provider, **context)
        self.provider = provider


class AuthenticationError(LLMError):
    pass


class RateLimitError(LLMError):
    pass


class LLMTimeoutError(LLMError):
    pass


class TransportError(LLMError):
    pass


# ---------- Structured output ----------

class OutputExtractionError(ESGPipelineError):
    def __init__(self, message: str, response_preview: str = "", **context: Any):
        super().__init__(message, response_preview=response_preview or None, **context)
        self.response_preview = response_preview


class EmptyResponseError(OutputExtractionError):
    pass


class MalformedJSONError(OutputExtractionError):
    pass


class SchemaMismatch(ESGPipelineError):
    def __init__(self, message: str, errors: List[str], **context: Any):
        super().__init__(message, **context)
        self.errors = errors


# ---------- Preconditions ----------

class ValidationIncomplete(ESGPipelineError):
    def __init__(self, message: str, missing_fields: List[str], **context: Any):
        super().__init__(message, **context)
        self.missing_fields = missing_fields


class MissingDDQResultError(ESGPipelineError):
    pass


# ---------- Document extraction ----------

class DocumentExtractionError(ESGPipelineError):
    pass


class UnsupportedDocumentError(DocumentExtractionError):
    pass


class EmptyDocumentError(DocumentExtractionError):
    pass


class EncryptedDocumentError(DocumentExtractionError):
    pass


class CorruptedDocumentError(DocumentExtractionError):
    pass


class DocumentTimeoutError(DocumentExtractionError):
    pass
