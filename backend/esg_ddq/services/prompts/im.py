"""Investment Memo prompt.

The memo is written from a completed DDQ: the DDQ is serialized verbatim into
the prompt and the model is asked to cite its areas by name.
"""
import json

from esg_ddq.models import CompanyProfile, DDQResult
from esg_ddq.rubric import FORBIDDEN_PHRASES, RISK_CATEGORY_DEFINITIONS, RISK_CATEGORY_VALUES
from esg_ddq.services.prompts import prompt_env, render_company_context

IM_SYSTEM_PROMPT = """You are an expert ESG investment analyst. Create detailed investment memos based on ESG due diligence assessments and the fund's ESG Risk Management Framework.

EVIDENCE REQUIREMENTS:
- Every finding must be traceable to the DDQ assessment, the company information or the framework
- When citing the company, quote its documents directly; if there is no direct quote, state "No explicit mention of [topic] in provided documents" and label any indirect reasoning as such
- NEVER use inference phrases like {{ forbidden }} - these are FORBIDDEN
- DO NOT invent facts (employee counts, certifications, incidents) that are not stated in the inputs
"""

IM_PROMPT_TEMPLATE = """
You are an ESG investment analyst. Using the ESG Risk Management Framework and the DDQ assessment results, create an Investment Memo following the EXACT template structure below.

{{ company_context }}

DDQ Assessment Summary:
{{ ddq_json }}

ESG Risk Management Framework:
{{ rmf_text }}

CRITICAL: Follow the EXACT format of the memo template:

1. Company Name: [name]
2. Product/ Activity/ Solution: [detailed description]
3. Findings from the ESG Due Diligence
   - Risk Category (Category C/B/B+): [category]
   - Accessibility of grievance redress mechanism (include website link): [description with link if available, or "Currently non-existent" if not]
   - Sector & sub-sector: [sector] - [sub-sector]
   - Countries of operation: [comma-separated list]
   - No. of Employees: [use the exact value from company information; do not say 'Not specified' unless truly unavailable]
   - Current risks and opportunities
     * Current Risks: [detailed bullet points with explanations]
     * Current Opportunities: [detailed bullet points with explanations]
   - Long-term risks and opportunities
     * Long term risks: [detailed bullet points with explanations]
     * Long term opportunities: [detailed bullet points with explanations]
   - Founders' commitment to and company capacity on ESG risk management: [detailed assessment]
   - Highlights of the relevant stakeholder consultations conducted, potential grievances, and risk of retaliation that could emerge and commitment to a stakeholder engagement plan.
     * Stakeholder Consultations: [detailed description]
     * Potential Grievances: [detailed description]
     * Risk of Retaliation: [detailed assessment]
   - Gaps in the fund's ESG requirements and proposed action plan to address gaps
     * Gaps: [detailed bullet points]
     * Action Plan: [detailed bullet points with specific actions]
   - Estimated cost of corrective actions and timeframe: [cost and timeframe, or "Not available" if not specified]
   - Limitation of ESG due diligence: [numbered list of limitations]

RISK CATEGORY GUIDELINES (ordered by severity, C lowest, A highest):
{% for category, definition in risk_categories %}
- {{ category }}: {{ definition }}
{% endfor %}

For current/long-term risks and opportunities:
- Each risk/opportunity is a multi-level bullet: a title line followed by nested explanation bullets
  Format: * [Main Risk/Opportunity Title]
    * [Detailed explanation bullet 1]
    * [Detailed explanation bullet 2]
    * [Additional context or implications]
- Reference specific DDQ findings by area name (e.g., "As identified in the DDQ under ESG Reporting, the company lacks formal ESG reporting...")
- Include specific examples from company operations (e.g., "Operations across {{ country_count }} countries require...")
- For opportunities, mention how they mitigate risks or create value

For gaps and action plan:
- Be specific about what's missing and reference the DDQ areas that need improvement
- Each action plan item names the action, who is responsible, the expected deliverable and a timeline where relevant
  Format: * [Specific action] - [Who is responsible] - [Expected deliverable] - [Timeline if relevant]
  Example: "Develop and implement a formal ESG Policy commensurate to {{ profile.company_name }}'s business stage - Founders - Board-approved ESG Policy - within 6 months of investment"

LIMITATIONS SECTION:
- Provide 2-3 comprehensive limitations covering data availability, assessment scope and company stage
- Each limitation should be detailed and specific
- Example: "The current ESG due diligence relies on self-reported data and informal, ad hoc processes, which may not capture all risks or operational nuances."

Return a JSON object with this exact structure:
{{ output_schema }}

Allowed values:
- "riskCategory": one of {{ risk_category_values }}

Be comprehensive and detailed. Reference specific DDQ findings in your responses.
"""


def im_output_schema(profile: CompanyProfile) -> str:
    """JSON skeleton with the identity fields pre-filled from the profile."""
    skeleton = {
        "companyName": profile.company_name,
        "productActivitySolution": "Detailed description of the product, activity or solution",
        "riskCategory": " | ".join(RISK_CATEGORY_VALUES),
        "grievanceRedressMechanism": "Description and website link if available, or 'Currently non-existent' if not",
        "sector": profile.sector,
        "subSector": profile.sub_sector,
        "countriesOfOperation": ", ".join(profile.countries_of_operation),
        "numberOfEmployees": profile.number_of_employees or "Not specified",
        "currentRisks": ["Detailed risk with nested explanation bullets"],
        "currentOpportunities": ["Detailed opportunity with nested explanation bullets"],
        "longTermRisks": ["Detailed long-term risk with nested explanation bullets"],
        "longTermOpportunities": ["Detailed long-term opportunity with nested explanation bullets"],
        "foundersCommitment": "Detailed assessment",
        "stakeholderConsultations": "Detailed description",
        "potentialGrievances": "Detailed description",
        "riskOfRetaliation": "Detailed assessment",
        "gaps": ["Detailed gap referencing a DDQ area"],
        "actionPlan": ["Action - Responsible party - Deliverable - Timeline"],
        "estimatedCost": "Estimated cost if available, or 'Not available'",
        "timeframe": "Timeframe for corrective actions",
        "limitations": ["1. Limitation", "2. Limitation"],
    }
    return json.dumps(skeleton, indent=2, ensure_ascii=False)


def build_im_system_prompt() -> str:
    forbidden = ", ".join(f'"{p}"' for p in FORBIDDEN_PHRASES)
    return prompt_env.from_string(IM_SYSTEM_PROMPT).render(forbidden=forbidden)


def build_im_prompt(
    profile: CompanyProfile,
    ddq_result: DDQResult,
    rmf_text: str,
    extracted_text: str | None = None,
    max_document_chars: int = 5000,
) -> str:
    return prompt_env.from_string(IM_PROMPT_TEMPLATE).render(
        company_context=render_company_context(
            profile, extracted_text, max_document_chars, include_practices=False
        ),
        ddq_json=json.dumps(ddq_result.to_wire(), indent=2, ensure_ascii=False),
        rmf_text=rmf_text,
        profile=profile,
        country_count=len(profile.countries_of_operation),
        risk_categories=list(RISK_CATEGORY_DEFINITIONS.items()),
        risk_category_values=", ".join(f'"{v}"' for v in RISK_CATEGORY_VALUES),
        output_schema=im_output_schema(profile),
    )
