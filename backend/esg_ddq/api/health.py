# esg_ddq/api/health.py
from datetime import datetime

from fastapi import APIRouter, Depends

from esg_ddq.api.dependencies import get_kb, get_settings
from esg_ddq.config import Settings
from esg_ddq.core.knowledge_base import KnowledgeBaseLoader
from esg_ddq.exceptions import KnowledgeBaseUnavailable

router = APIRouter()


@router.get("/api/health")
async def health_check(
    cfg: Settings = Depends(get_settings),
    knowledge_base: KnowledgeBaseLoader = Depends(get_kb),
):
    """Detailed health check"""
    try:
        await knowledge_base.load()
        kb_available = True
    except KnowledgeBaseUnavailable:
        kb_available = False

    providers = cfg.available_providers()
    return {
        "status": "healthy" if providers and kb_available else "degraded",
        "timestamp": datetime.now().isoformat(),
        "environment": cfg.environment,
        "primary_provider": cfg.llm_primary_provider,
        "configured_providers": providers,
        "knowledge_base_loaded": kb_available,
    }
