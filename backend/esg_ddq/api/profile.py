# esg_ddq/api/profile.py
from fastapi import APIRouter, Depends, HTTPException

from esg_ddq.api.dependencies import get_profile_extractor, get_request_id, require_credentials
from esg_ddq.api.schemas import ExtractInfoRequest
from esg_ddq.config import Settings
from esg_ddq.services.profile_extractor import ProfileExtractor
from esg_ddq.utils.logging import logger

router = APIRouter()


@router.post("/api/extract-info")
async def extract_info(
    body: ExtractInfoRequest,
    cfg: Settings = Depends(require_credentials),
    extractor: ProfileExtractor = Depends(get_profile_extractor),
    request_id: str = Depends(get_request_id),
):
    """Build a CompanyProfile from previously extracted document text."""
    if body.text is None:
        raise HTTPException(status_code=400, detail="No text provided")
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Text is empty after trimming")

    logger.info(
        "Extract info request started",
        extra={"request_id": request_id, "text_length": len(body.text), "truncated": len(body.text) > cfg.profile_extraction_chars}
    )
    profile = await extractor.extract(body.text)
    return {**profile.model_dump(by_alias=True), "requestId": request_id}
