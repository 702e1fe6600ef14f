# esg_ddq/core/middleware.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from esg_ddq.config import settings
from esg_ddq.utils.id_generator import generate_request_id

REQUEST_ID_HEADER = "X-Request-ID"


def setup_middleware(app: FastAPI):
    """Configure all middleware"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def assign_request_id(request: Request, call_next):
        # Correlation id for logs and error bodies; honours an upstream id
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response
