"""Base exporter with python-docx building blocks shared by the DDQ and IM documents."""

from io import BytesIO
from typing import List, Optional, Sequence

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH

BULLET_MARKERS = ("* ", "- ", "• ")


class BaseExporter:
    """Base class for all exporters with common utilities."""

    def __init__(self):
        self.doc = None

    def create_document(self) -> Document:
        """Create a new Word document."""
        self.doc = Document()
        return self.doc

    def save_to_bytes(self) -> bytes:
        """Save document to bytes."""
        if not self.doc:
            raise ValueError("No document created. Call create_document() first.")

        buffer = BytesIO()
        self.doc.save(buffer)
        buffer.seek(0)
        return buffer.read()

    def add_title(self, text: str, alignment: str = 'center'):
        """Add a title to the document."""
        if not self.doc:
            raise ValueError("No document created")

        para = self.doc.add_heading(text, level=1)
        if alignment == 'center':
            para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        return para

    def add_heading(self, text: str, level: int = 2):
        if not self.doc:
            raise ValueError("No document created")
        return self.doc.add_heading(text, level=level)

    def add_paragraph(self, text: str, bold: bool = False, italic: bool = False):
        """Add a paragraph with optional formatting."""
        if not self.doc:
            raise ValueError("No document created")

        para = self.doc.add_paragraph()
        run = para.add_run(text or "")
        if bold:
            run.bold = True
        if italic:
            run.italic = True
        return para

    def add_label_value(self, label: str, value: Optional[str]):
        """Bold label followed by its value on one line."""
        if not self.doc:
            raise ValueError("No document created")

        para = self.doc.add_paragraph()
        para.add_run(f"{label}: ").bold = True
        para.add_run(value if value else "-")
        return para

    def add_bullets(self, items: Sequence[str]):
        """One bullet per item; indented continuation lines become nested bullets."""
        if not self.doc:
            raise ValueError("No document created")
        if not items:
            self.add_paragraph("-")
            return

        for item in items:
            lines = [line for line in (item or "").split('\n') if line.strip()]
            for index, line in enumerate(lines):
                nested = index > 0 and (line.startswith((' ', '\t')) or line.strip().startswith(BULLET_MARKERS))
                text = _strip_marker(line.strip())
                style = 'List Bullet 2' if nested else 'List Bullet'
                self.doc.add_paragraph(text, style=style)

    def add_table(self, headers: List[str], rows: List[List[str]], column_widths: Optional[List] = None):
        """Grid table with a bold header row."""
        if not self.doc:
            raise ValueError("No document created")

        table = self.doc.add_table(rows=1, cols=len(headers))
        table.style = 'Table Grid'
        for cell, header in zip(table.rows[0].cells, headers):
            cell.text = ""
            cell.paragraphs[0].add_run(header).bold = True
        for row in rows:
            cells = table.add_row().cells
            for cell, value in zip(cells, row):
                cell.text = value or ""
        if column_widths:
            for row in table.rows:
                for cell, width in zip(row.cells, column_widths):
                    cell.width = width
        return table


def _strip_marker(text: str) -> str:
    for marker in BULLET_MARKERS:
        if text.startswith(marker):
            return text[len(marker):].strip()
    return text
