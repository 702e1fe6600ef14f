# esg_ddq/api/upload.py
import time

from fastapi import APIRouter, Depends, File, UploadFile

from esg_ddq.api.dependencies import get_document_processor, get_request_id
from esg_ddq.api.schemas import UploadResponse
from esg_ddq.services.document_processor import DocumentProcessor
from esg_ddq.utils.logging import logger

router = APIRouter()


@router.post("/api/upload")
async def upload_document(
    file: UploadFile = File(...),
    processor: DocumentProcessor = Depends(get_document_processor),
    request_id: str = Depends(get_request_id),
):
    """Extract plain text from an uploaded PDF, Word or text document."""
    start = time.time()
    content = await file.read()
    filename = file.filename or "upload"
    logger.info(
        "Upload request started",
        extra={"request_id": request_id, "file_name": filename, "file_size": len(content), "content_type": file.content_type}
    )

    extracted = await processor.process(filename, content, file.content_type)

    logger.info(
        f"Upload processed in {int((time.time() - start) * 1000)}ms",
        extra={"request_id": request_id, "text_length": len(extracted.text)}
    )
    return UploadResponse(
        text=extracted.text,
        metadata=extracted.metadata,
        file_name=filename,
        request_id=request_id,
    ).model_dump(by_alias=True)
