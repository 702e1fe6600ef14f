import asyncio
from io import BytesIO

import fitz
import pytest
from docx import Document
from fastapi import HTTPException

from esg_ddq.core.parsers import extract_text, select_parser
from esg_ddq.core.parsers.docx_parser import DOCX_CONTENT_TYPE, DocxParser
from esg_ddq.core.parsers.pymupdf_parser import PyMuPDFParser
from esg_ddq.core.parsers.text_parser import TextParser
from esg_ddq.exceptions import (
    CorruptedDocumentError,
    EmptyDocumentError,
    EncryptedDocumentError,
    UnsupportedDocumentError,
)
from esg_ddq.services.document_processor import DocumentProcessor


def _pdf_bytes(text="Acme Health operates telemedicine clinics in Vietnam.", **save_options):
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text)
    data = doc.tobytes(**save_options)
    doc.close()
    return data


def _docx_bytes():
    document = Document()
    document.add_paragraph("Acme Health ESG overview")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Employees"
    table.rows[0].cells[1].text = "50-100"
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def test_text_upload_is_stripped_and_counted():
    extracted = asyncio.run(extract_text("notes.txt", "\ufeff  Acme Health profile \n".encode("utf-8")))

    assert extracted.text == "Acme Health profile"
    assert extracted.metadata["parser"] == "text"
    assert extracted.metadata["char_count"] == len("Acme Health profile")


def test_whitespace_only_document_is_empty():
    with pytest.raises(EmptyDocumentError):
        asyncio.run(extract_text("blank.txt", b"   \n\t "))


def test_invalid_utf8_text_is_corrupted():
    with pytest.raises(CorruptedDocumentError):
        asyncio.run(extract_text("latin.txt", b"\xff\xfe\xfa broken"))


def test_unsupported_extension():
    with pytest.raises(UnsupportedDocumentError) as exc_info:
        select_parser("deck.pptx", "application/vnd.ms-powerpoint")
    assert exc_info.value.context["file_name"] == "deck.pptx"


def test_mime_type_wins_over_extension():
    assert isinstance(select_parser("upload", "application/pdf"), PyMuPDFParser)
    assert isinstance(select_parser("report.PDF", "application/octet-stream"), PyMuPDFParser)
    assert isinstance(select_parser("profile.docx", DOCX_CONTENT_TYPE), DocxParser)
    assert isinstance(select_parser("notes.txt"), TextParser)


def test_docx_paragraphs_and_tables():
    extracted = asyncio.run(extract_text("profile.docx", _docx_bytes(), DOCX_CONTENT_TYPE))

    assert "Acme Health ESG overview" in extracted.text
    assert "Employees | 50-100" in extracted.text


def test_corrupted_docx():
    with pytest.raises(CorruptedDocumentError):
        asyncio.run(extract_text("profile.docx", b"not a zip archive", DOCX_CONTENT_TYPE))


def test_pdf_text_and_metadata():
    extracted = asyncio.run(extract_text("deck.pdf", _pdf_bytes(), "application/pdf"))

    assert "Acme Health operates telemedicine clinics" in extracted.text
    assert extracted.metadata["pages"] == 1
    assert extracted.metadata["parser"] == "pymupdf"


def test_encrypted_pdf():
    data = _pdf_bytes(encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="secret")
    with pytest.raises(EncryptedDocumentError):
        asyncio.run(extract_text("locked.pdf", data, "application/pdf"))


def test_corrupted_pdf():
    with pytest.raises(CorruptedDocumentError):
        asyncio.run(extract_text("broken.pdf", b"this is plainly not a pdf document", "application/pdf"))


def test_processor_rejects_oversized_upload():
    processor = DocumentProcessor(max_file_size_bytes=10)

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(processor.process("big.txt", b"x" * 11, "text/plain"))
    assert exc_info.value.status_code == 413


def test_processor_extracts_text():
    processor = DocumentProcessor(max_file_size_bytes=1024)
    extracted = asyncio.run(processor.process("notes.txt", b"Acme Health", "text/plain"))
    assert extracted.text == "Acme Health"
