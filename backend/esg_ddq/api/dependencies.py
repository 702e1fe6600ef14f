# esg_ddq/api/dependencies.py
"""Service providers for route handlers.

Routes receive their collaborators through `Depends` so tests can swap any of
them with `app.dependency_overrides`.
"""
from fastapi import Depends, Request

from esg_ddq.config import Settings, settings
from esg_ddq.core.knowledge_base import KnowledgeBaseLoader, get_knowledge_base
from esg_ddq.core.llm.gateway import LLMGateway, get_llm_gateway
from esg_ddq.services.ddq_engine import DDQEngine
from esg_ddq.services.document_processor import DocumentProcessor
from esg_ddq.services.im_engine import IMEngine
from esg_ddq.services.profile_extractor import ProfileExtractor
from esg_ddq.utils.id_generator import generate_request_id


def get_settings() -> Settings:
    return settings


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = generate_request_id()
        request.state.request_id = request_id
    return request_id


def require_credentials(cfg: Settings = Depends(get_settings)) -> Settings:
    """Raises ConfigurationError before any core work when no provider key is set."""
    cfg.require_llm_credentials()
    return cfg


def get_gateway() -> LLMGateway:
    return get_llm_gateway()


def get_kb() -> KnowledgeBaseLoader:
    return get_knowledge_base()


def get_document_processor(cfg: Settings = Depends(get_settings)) -> DocumentProcessor:
    return DocumentProcessor(max_file_size_bytes=int(cfg.max_file_size_mb * 1024 * 1024))


def get_profile_extractor(
    gateway: LLMGateway = Depends(get_gateway),
    cfg: Settings = Depends(get_settings),
) -> ProfileExtractor:
    return ProfileExtractor(gateway, cfg)


def get_ddq_engine(
    gateway: LLMGateway = Depends(get_gateway),
    knowledge_base: KnowledgeBaseLoader = Depends(get_kb),
    cfg: Settings = Depends(get_settings),
) -> DDQEngine:
    return DDQEngine(gateway, knowledge_base, cfg=cfg)


def get_im_engine(
    gateway: LLMGateway = Depends(get_gateway),
    knowledge_base: KnowledgeBaseLoader = Depends(get_kb),
    cfg: Settings = Depends(get_settings),
) -> IMEngine:
    return IMEngine(gateway, knowledge_base, cfg=cfg)
