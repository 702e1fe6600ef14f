# esg_ddq/api/errors.py
"""Maps pipeline errors to HTTP responses.

Every error body is `{"error": <message>, "requestId": <id>}`; a few error
kinds add one diagnostic field (missing profile fields, schema problems).
"""
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from esg_ddq.api.dependencies import get_request_id
from esg_ddq.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DocumentExtractionError,
    DocumentTimeoutError,
    ESGPipelineError,
    KnowledgeBaseUnavailable,
    LLMTimeoutError,
    MissingDDQResultError,
    OutputExtractionError,
    RateLimitError,
    SchemaMismatch,
    TransportError,
    UnsupportedDocumentError,
    ValidationIncomplete,
)
from esg_ddq.utils.logging import logger

STATUS_BY_ERROR = {
    ConfigurationError: 500,
    KnowledgeBaseUnavailable: 503,
    AuthenticationError: 500,
    RateLimitError: 429,
    LLMTimeoutError: 504,
    TransportError: 502,
    OutputExtractionError: 502,
    SchemaMismatch: 502,
    ValidationIncomplete: 422,
    MissingDDQResultError: 400,
    UnsupportedDocumentError: 400,
    DocumentTimeoutError: 504,
    DocumentExtractionError: 422,
    ESGPipelineError: 500,
}


def status_for(exc: ESGPipelineError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 500


def error_body(message: str, request_id: str, **details: Any) -> Dict[str, Any]:
    return {"error": message, "requestId": request_id, **details}


async def pipeline_error_handler(request: Request, exc: ESGPipelineError) -> JSONResponse:
    request_id = get_request_id(request)
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"{request.url.path} failed: {exc}",
        extra={"request_id": request_id, "error_type": type(exc).__name__, "status_code": status_code, **exc.context}
    )

    details: Dict[str, Any] = {}
    if isinstance(exc, ValidationIncomplete):
        details["missingFields"] = exc.missing_fields
    elif isinstance(exc, SchemaMismatch):
        details["validationErrors"] = exc.errors
    return JSONResponse(status_code=status_code, content=error_body(exc.message, request_id, **details))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    request_id = get_request_id(request)
    logger.warning(
        f"{request.url.path} rejected: {exc.detail}",
        extra={"request_id": request_id, "status_code": exc.status_code}
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail), request_id))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    request_id = get_request_id(request)
    problems = [
        f"{'/'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    ]
    logger.warning(f"{request.url.path} invalid request body", extra={"request_id": request_id, "problems": problems})
    return JSONResponse(
        status_code=422,
        content=error_body("Invalid request body", request_id, validationErrors=problems),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ESGPipelineError, pipeline_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
