"""Text extraction for uploaded documents.

`extract_text` picks a parser by MIME type, falling back to the file
extension, and guarantees non-empty text or a typed DocumentExtractionError.
"""
from typing import List, Optional

from esg_ddq.config import Settings, settings as default_settings
from esg_ddq.core.parsers.base import DocumentParser, ExtractedText
from esg_ddq.core.parsers.docx_parser import DocxParser
from esg_ddq.core.parsers.pymupdf_parser import PyMuPDFParser
from esg_ddq.core.parsers.text_parser import TextParser
from esg_ddq.exceptions import EmptyDocumentError, UnsupportedDocumentError
from esg_ddq.utils.logging import logger

SUPPORTED_FORMATS = "PDF, Word (.docx), or text (.txt)"


def default_parsers(cfg: Optional[Settings] = None) -> List[DocumentParser]:
    cfg = cfg or default_settings
    return [PyMuPDFParser(timeout_seconds=cfg.parser_timeout_seconds), DocxParser(), TextParser()]


def select_parser(
    filename: str,
    content_type: Optional[str] = None,
    parsers: Optional[List[DocumentParser]] = None,
) -> DocumentParser:
    candidates = parsers if parsers is not None else default_parsers()
    # MIME type wins; the extension is the fallback for generic uploads
    for parser in candidates:
        if content_type and content_type in parser.content_types:
            return parser
    for parser in candidates:
        if parser.supports(filename):
            return parser
    raise UnsupportedDocumentError(
        f"Unsupported file type. Please upload a {SUPPORTED_FORMATS} file.",
        file_name=filename,
        content_type=content_type,
    )


async def extract_text(
    filename: str,
    content: bytes,
    content_type: Optional[str] = None,
    parsers: Optional[List[DocumentParser]] = None,
) -> ExtractedText:
    """Extract plain text from an uploaded document.

    Raises:
        UnsupportedDocumentError: no parser for this type
        EmptyDocumentError: the document has no extractable text
        EncryptedDocumentError / CorruptedDocumentError / DocumentTimeoutError: from the parser
    """
    parser = select_parser(filename, content_type, parsers)
    logger.info(
        f"Extracting text with {parser.name}",
        extra={"file_name": filename, "content_type": content_type, "file_size": len(content)}
    )
    extracted = await parser.parse(content, filename)
    extracted.text = extracted.text.strip()

    if not extracted.text:
        raise EmptyDocumentError(
            "No text could be extracted from the file. It may be empty, scanned, or image-based.",
            file_name=filename,
            parser=parser.name,
        )

    extracted.metadata.setdefault("char_count", len(extracted.text))
    return extracted


__all__ = ["extract_text", "select_parser", "default_parsers", "ExtractedText", "DocumentParser"]
