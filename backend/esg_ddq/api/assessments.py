# esg_ddq/api/assessments.py
"""DDQ and Investment Memo generation endpoints.

The two stages are separate requests: the client posts the DDQ it received
from /api/generate-ddq back to /api/generate-im.
"""
from fastapi import APIRouter, Depends, HTTPException

from esg_ddq.api.dependencies import get_ddq_engine, get_im_engine, get_request_id, require_credentials
from esg_ddq.api.schemas import GenerateDDQRequest, GenerateIMRequest
from esg_ddq.config import Settings
from esg_ddq.services.ddq_engine import DDQEngine
from esg_ddq.services.im_engine import IMEngine
from esg_ddq.utils.logging import logger

router = APIRouter()


@router.post("/api/generate-ddq")
async def generate_ddq(
    body: GenerateDDQRequest,
    cfg: Settings = Depends(require_credentials),
    engine: DDQEngine = Depends(get_ddq_engine),
    request_id: str = Depends(get_request_id),
):
    if body.company_info is None:
        raise HTTPException(status_code=400, detail="Company information is required")

    logger.info(
        "DDQ generation request started",
        extra={"request_id": request_id, "company_name": body.company_info.company_name}
    )
    result = await engine.generate(body.company_info, body.extracted_text)
    return result.to_wire()


@router.post("/api/generate-im")
async def generate_im(
    body: GenerateIMRequest,
    cfg: Settings = Depends(require_credentials),
    engine: IMEngine = Depends(get_im_engine),
    request_id: str = Depends(get_request_id),
):
    if body.company_info is None or body.ddq_result is None:
        raise HTTPException(status_code=400, detail="Company information and DDQ result are required")

    logger.info(
        "IM generation request started",
        extra={"request_id": request_id, "company_name": body.company_info.company_name}
    )
    result = await engine.generate(body.company_info, body.ddq_result, body.extracted_text)
    return result.to_wire()
