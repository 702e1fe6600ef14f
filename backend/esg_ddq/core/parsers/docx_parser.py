# backend/esg_ddq/core/parsers/docx_parser.py
"""Word (.docx) parser using python-docx"""
import asyncio
import zipfile
from io import BytesIO

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from esg_ddq.core.parsers.base import DocumentParser, ExtractedText
from esg_ddq.exceptions import CorruptedDocumentError
from esg_ddq.utils.logging import logger

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class DocxParser(DocumentParser):
    """Body paragraphs followed by table rows (cells joined with ' | ')."""

    content_types = (DOCX_CONTENT_TYPE,)
    extensions = (".docx",)

    @property
    def name(self) -> str:
        return "python-docx"

    async def parse(self, content: bytes, filename: str) -> ExtractedText:
        def _sync_parse():
            try:
                document = Document(BytesIO(content))
            except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
                raise CorruptedDocumentError(
                    "The Word document appears to be corrupted or invalid. Please try a different file.",
                    file_name=filename,
                    error=str(e),
                ) from e

            parts = [p.text for p in document.paragraphs if p.text.strip()]
            for table in document.tables:
                for row in table.rows:
                    cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                    if cells:
                        parts.append(" | ".join(cells))
            title = document.core_properties.title or filename
            return "\n".join(parts), title, len(document.tables)

        text, title, table_count = await asyncio.to_thread(_sync_parse)
        logger.info(f"python-docx extracted {len(text)} chars", extra={"table_count": table_count})
        return ExtractedText(text=text, metadata={"title": title, "parser": self.name, "tables": table_count})
