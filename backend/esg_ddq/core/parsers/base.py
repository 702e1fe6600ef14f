# backend/esg_ddq/core/parsers/base.py
"""Base class for all document parsers"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass
class ExtractedText:
    """Output from document parser"""
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)  # pages, title, parser, char_count...


class DocumentParser(ABC):
    """Base class for all document parsers

    Each parser implementation should:
    1. Turn raw upload bytes into plain text
    2. Raise a DocumentExtractionError subclass on failure
    3. Return standardized ExtractedText
    """

    #: MIME types and lower-case file extensions this parser claims
    content_types: Tuple[str, ...] = ()
    extensions: Tuple[str, ...] = ()

    @abstractmethod
    async def parse(self, content: bytes, filename: str) -> ExtractedText:
        """Parse document bytes and return extracted text

        Raises:
            EncryptedDocumentError / CorruptedDocumentError / DocumentTimeoutError
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Parser identifier (e.g., 'pymupdf', 'python-docx')"""
        pass

    def supports(self, filename: str, content_type: str | None = None) -> bool:
        if content_type and content_type in self.content_types:
            return True
        return filename.lower().endswith(self.extensions)
