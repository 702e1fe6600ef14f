"""DDQ exporter - Word.

Document order mirrors DDQResult: Risk Management, Environment, Social,
Governance, then Track Record.
"""
from docx.shared import Inches

from esg_ddq.models import DDQResult
from esg_ddq.rubric import CATEGORY_TITLES, TRACK_RECORD_FIELDS
from esg_ddq.services.exporters.base_exporter import BaseExporter
from esg_ddq.utils.logging import logger

THRESHOLD_NOTE = (
    "The Fund defines thresholds for the ESG DD questionnaire. Areas where an investee does not meet the "
    "Fund's threshold require an Action Plan item. Levels below the threshold are coloured yellow, while "
    "levels above the threshold are coloured green."
)

TABLE_HEADERS = ["Area", "Definition", "Materiality", "Level", "Comments"]
COLUMN_WIDTHS = [Inches(1.3), Inches(1.6), Inches(0.9), Inches(0.9), Inches(2.8)]


class DDQExporter(BaseExporter):
    def export_to_word(self, result: DDQResult) -> bytes:
        self.create_document()
        self.add_title("ESG Due Diligence Questionnaire", alignment="left")
        self.add_paragraph(THRESHOLD_NOTE, italic=True)

        for key, items in result.category_items().items():
            self.add_heading(f"{CATEGORY_TITLES[key]} Questionnaire", level=2)
            self.add_table(
                TABLE_HEADERS,
                [[item.area, item.definition, item.materiality, item.level, item.comments] for item in items],
                COLUMN_WIDTHS,
            )

        self.add_heading("Track Record Questionnaire", level=2)
        track_record = result.track_record.model_dump(by_alias=True)
        for key, label in TRACK_RECORD_FIELDS.items():
            value = track_record.get(key)
            if value is None:
                continue
            self.add_paragraph(f"{label}:", bold=True)
            self.add_paragraph(value)

        content = self.save_to_bytes()
        logger.info(f"DDQ document rendered ({len(content):,} bytes)")
        return content
