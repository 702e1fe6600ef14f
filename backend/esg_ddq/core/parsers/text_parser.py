# backend/esg_ddq/core/parsers/text_parser.py
"""Plain-text parser"""
from esg_ddq.core.parsers.base import DocumentParser, ExtractedText
from esg_ddq.exceptions import CorruptedDocumentError


class TextParser(DocumentParser):
    content_types = ("text/plain",)
    extensions = (".txt",)

    @property
    def name(self) -> str:
        return "text"

    async def parse(self, content: bytes, filename: str) -> ExtractedText:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CorruptedDocumentError(
                "The text file is not valid UTF-8. Please re-save it with UTF-8 encoding.",
                file_name=filename,
            ) from e
        return ExtractedText(text=text, metadata={"title": filename, "parser": self.name})
