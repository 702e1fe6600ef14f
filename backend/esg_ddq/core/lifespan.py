# esg_ddq/core/lifespan.py
from contextlib import asynccontextmanager

from esg_ddq.config import settings
from esg_ddq.core.knowledge_base import get_knowledge_base
from esg_ddq.exceptions import KnowledgeBaseUnavailable
from esg_ddq.utils.logging import logger


@asynccontextmanager
async def lifespan(app):
    """Run setup and teardown logic for the app lifecycle."""

    # ---------- Startup ----------
    logger.info("Application starting", extra={
        "environment": settings.environment,
        "primary_provider": settings.llm_primary_provider,
        "configured_providers": settings.available_providers(),
        "max_file_size_mb": settings.max_file_size_mb
    })

    if not settings.available_providers():
        logger.warning("No LLM API key configured; generation endpoints will fail until one is set")

    # Warm the framework cache; requests retry the load if this fails
    try:
        await get_knowledge_base().load()
    except KnowledgeBaseUnavailable as e:
        logger.error(f"Knowledge base not loaded at startup: {e}", extra=e.context)

    yield

    # ---------- Shutdown ----------
    logger.info("Application shutting down")
