"""Investment Memo exporter - Word.

Sections follow the memo template order: identity block, findings,
risks/opportunities, founders' commitment, stakeholders, gaps and action
plan, cost/timeframe, limitations.
"""
from esg_ddq.models import IMResult
from esg_ddq.services.exporters.base_exporter import BaseExporter
from esg_ddq.utils.logging import logger

STAKEHOLDER_HEADING = (
    "Highlights of the relevant stakeholder consultations conducted, potential grievances, and risk of "
    "retaliation that could emerge and commitment to a stakeholder engagement plan."
)


class IMExporter(BaseExporter):
    def export_to_word(self, result: IMResult) -> bytes:
        self.create_document()
        self.add_title("ESG DD Template for Investment Memos", alignment="left")

        self.add_label_value("Company Name", result.company_name)
        self.add_label_value("Product/ Activity/ Solution", result.product_activity_solution)

        self.add_heading("Findings from the ESG Due Diligence", level=2)
        self.add_label_value("Risk Category (Category C/B+/B)", result.risk_category)
        self.add_label_value(
            "Accessibility of grievance redress mechanism (include website link)",
            result.grievance_redress_mechanism,
        )
        self.add_label_value("Sector & sub-sector", f"{result.sector} - {result.sub_sector}")
        self.add_label_value("Countries of operation", result.countries_of_operation)
        self.add_label_value("No. of Employees", result.number_of_employees)

        self.add_heading("Current risks and opportunities", level=3)
        self.add_paragraph("Current Risks", bold=True)
        self.add_bullets(result.current_risks)
        self.add_paragraph("Current Opportunities", bold=True)
        self.add_bullets(result.current_opportunities)

        self.add_heading("Long-term risks and opportunities", level=3)
        self.add_paragraph("Long term risks", bold=True)
        self.add_bullets(result.long_term_risks)
        self.add_paragraph("Long term opportunities", bold=True)
        self.add_bullets(result.long_term_opportunities)

        self.add_heading("Founders' commitment to and company capacity on ESG risk management", level=3)
        self.add_paragraph(result.founders_commitment)

        self.add_heading(STAKEHOLDER_HEADING, level=3)
        self.add_label_value("Stakeholder Consultations", result.stakeholder_consultations)
        self.add_label_value("Potential Grievances", result.potential_grievances)
        self.add_label_value("Risk of Retaliation", result.risk_of_retaliation)

        self.add_heading("Gaps in the fund's ESG requirements and proposed action plan to address gaps", level=3)
        self.add_paragraph("Gaps:", bold=True)
        self.add_bullets(result.gaps)
        self.add_paragraph("Action Plan:", bold=True)
        self.add_bullets(result.action_plan)

        self.add_heading("Estimated cost of corrective actions and timeframe", level=3)
        self.add_label_value("Estimated cost", result.estimated_cost or "Not available")
        self.add_label_value("Timeframe", result.timeframe or "Not available")

        self.add_heading("Limitation of ESG due diligence", level=3)
        for index, limitation in enumerate(result.limitations, start=1):
            # Models often number the entries themselves
            text = limitation.lstrip()
            if not text[:1].isdigit():
                text = f"{index}. {text}"
            self.add_paragraph(text)

        content = self.save_to_bytes()
        logger.info(f"IM document rendered ({len(content):,} bytes)", extra={"company_name": result.company_name})
        return content
