# esg_ddq/api/downloads.py
from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from esg_ddq.api.schemas import DownloadDDQRequest, DownloadIMRequest
from esg_ddq.services.exporters import DOCX_MEDIA_TYPE, render_ddq, render_im

router = APIRouter()


def _attachment(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/api/download-ddq")
def download_ddq(body: DownloadDDQRequest):
    if body.ddq_result is None:
        raise HTTPException(status_code=400, detail="DDQ result is required")
    return _attachment(render_ddq(body.ddq_result), "ESG_DDQ.docx")


@router.post("/api/download-im")
def download_im(body: DownloadIMRequest):
    if body.im_result is None:
        raise HTTPException(status_code=400, detail="IM result is required")
    return _attachment(render_im(body.im_result), "ESG_IM.docx")
