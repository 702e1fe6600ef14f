# backend/esg_ddq/services/document_processor.py
from typing import List, Optional

from fastapi import HTTPException

from esg_ddq.core.parsers import DocumentParser, ExtractedText, extract_text, select_parser
from esg_ddq.utils.logging import logger


class DocumentProcessor:
    """Validate uploads and extract their text"""

    def __init__(self, max_file_size_bytes: int, parsers: Optional[List[DocumentParser]] = None):
        self.max_file_size_bytes = max_file_size_bytes
        self.parsers = parsers

    def validate_file(self, filename: str, content: bytes, content_type: Optional[str] = None):
        """
        Validate uploaded file.
        Raises HTTPException (413) when too large, UnsupportedDocumentError for unknown types.
        """
        size_mb = len(content) / (1024 * 1024)
        if len(content) > self.max_file_size_bytes:
            logger.warning(f"File too large: {size_mb:.1f}MB", extra={"file_name": filename})
            raise HTTPException(
                status_code=413,
                detail=f"File size ({size_mb:.2f}MB) exceeds the maximum allowed size of "
                       f"{self.max_file_size_bytes / (1024 * 1024):.1f}MB. Please upload a smaller file "
                       f"or split it into multiple files.",
            )

        select_parser(filename, content_type, self.parsers)
        logger.info(f"File validation passed: {filename} ({size_mb:.1f}MB)")

    async def process(self, filename: str, content: bytes, content_type: Optional[str] = None) -> ExtractedText:
        """Validate then extract. Extraction errors propagate as DocumentExtractionError subclasses."""
        self.validate_file(filename, content, content_type)
        extracted = await extract_text(filename, content, content_type, self.parsers)
        logger.info(
            f"Successfully extracted {len(extracted.text)} characters from {filename}",
            extra={"parser": extracted.metadata.get("parser")}
        )
        return extracted
