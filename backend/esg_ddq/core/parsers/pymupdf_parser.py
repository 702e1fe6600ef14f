# backend/esg_ddq/core/parsers/pymupdf_parser.py
"""PyMuPDF (fitz) parser for digital PDFs"""
import asyncio
import time

import fitz  # PyMuPDF

from esg_ddq.core.parsers.base import DocumentParser, ExtractedText
from esg_ddq.exceptions import CorruptedDocumentError, DocumentTimeoutError, EncryptedDocumentError
from esg_ddq.utils.logging import logger


class PyMuPDFParser(DocumentParser):
    """Text extraction for digital PDFs. Scanned (image-only) PDFs come back empty."""

    content_types = ("application/pdf",)
    extensions = (".pdf",)

    def __init__(self, timeout_seconds: float = 240):
        self.timeout_seconds = timeout_seconds

    @property
    def name(self) -> str:
        return "pymupdf"

    async def parse(self, content: bytes, filename: str) -> ExtractedText:
        """Extract text without blocking the event loop.

        Page iteration runs in a worker thread, bounded by `timeout_seconds`.
        """
        start_time = time.time()
        logger.info(f"PyMuPDF parsing (thread offload): {filename}", extra={"file_size": len(content)})

        def _sync_parse():
            try:
                doc = fitz.open(stream=content, filetype="pdf")
            except (RuntimeError, ValueError) as e:
                raise CorruptedDocumentError(
                    "The PDF file appears to be corrupted or invalid. Please try a different file.",
                    file_name=filename,
                    error=str(e),
                ) from e
            try:
                if doc.needs_pass:
                    raise EncryptedDocumentError(
                        "The PDF file is encrypted or password-protected. Please remove the password and try again.",
                        file_name=filename,
                    )
                text_parts = [page.get_text() for page in doc]
                title = (doc.metadata or {}).get("title") or filename
                return "\n\n".join(text_parts), len(text_parts), title
            finally:
                doc.close()

        try:
            full_text, page_count, title = await asyncio.wait_for(
                asyncio.to_thread(_sync_parse), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise DocumentTimeoutError(
                f"PDF processing timed out after {self.timeout_seconds:.0f}s. The file may be too large or "
                f"complex. Please try a smaller file or split it into multiple files.",
                file_name=filename,
            ) from e

        processing_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"PyMuPDF extracted {len(full_text)} chars from {page_count} pages in {processing_time_ms}ms",
            extra={"parser_offload": True}
        )
        return ExtractedText(
            text=full_text,
            metadata={
                "pages": page_count,
                "title": title,
                "parser": self.name,
                "processing_time_ms": processing_time_ms,
            },
        )
