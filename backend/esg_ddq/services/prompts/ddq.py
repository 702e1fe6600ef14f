"""ESG Due Diligence Questionnaire prompt.

Sections, in order:
1. company context (profile + first N chars of the uploaded document)
2. knowledge-search evidence
3. Non-existent vs Level 0 reference per rubric area
4. company-specific materiality signals
5. the full Risk Management Framework text
6. numbered assessment instructions
7. output contract naming every required area per category
"""
import json
import re
from typing import List

from esg_ddq.models import CompanyProfile
from esg_ddq.rubric import (
    CATEGORY_AREAS,
    FORBIDDEN_PHRASES,
    LEVEL_DEFINITIONS,
    LEVEL_VALUES,
    MATERIALITY_VALUES,
    TRACK_RECORD_FIELDS,
)
from esg_ddq.services.prompts import prompt_env, render_company_context

MULTI_COUNTRY_THRESHOLD = 3

# Keyword -> signal. Matched case-insensitively against sector, sub-sector and narratives.
CONSUMER_FACING_TERMS = [
    "consumer", "customer", "patient", "retail", "b2c", "ticketing", "events", "e-commerce",
    "marketplace", "telemedicine", "healthcare", "education", "students", "users",
]
ENVIRONMENTAL_IMPACT_TERMS = [
    "manufacturing", "energy", "transport", "logistics", "mining", "agriculture", "construction",
    "events", "venues", "factory", "fleet", "chemical",
]
COMMUNITY_FACING_TERMS = [
    "community", "communities", "venue", "tourism", "local partner", "rural", "clinic", "clinics", "hospital", "hospitals",
]
DATA_PAYMENT_TERMS = [
    "payment", "payments", "wallet", "fintech", "lending", "data", "platform", "app", "digital",
    "transactions", "medical records", "personal information",
]

MATERIALITY_GUIDANCE = """   - Materiality (High/Medium/Low/Non-existent) based on the company's sector, operations, and scale:
     * HIGH Materiality if:
       - Company operates in multiple countries (3+ countries = High)
       - Consumer-facing business (direct customer or patient interaction, ticketing, events)
       - Environmental impact sector (events, manufacturing, energy, transportation)
       - Community-facing operations (events, venues, clinics, local partnerships)
       - Multi-country operations with varying regulatory environments (corruption risk)
       - Digital platform handling payments/data (cyber security, AML/KYC)
       - Operations affecting local communities (events, venues, tourism)
     * MEDIUM Materiality if:
       - Single-country or limited geographic scope
       - B2B operations with limited community impact
       - Low environmental footprint
     * LOW Materiality if:
       - Minimal operations, very small scale
       - No direct environmental or social impact
       - Not applicable to business model"""

DDQ_SYSTEM_PROMPT = """You are an expert ESG assessor. Analyze companies against the fund's ESG Risk Management Framework and provide accurate, detailed assessments.

CRITICAL REQUIREMENTS:

1. LEVEL DETERMINATION:
- "Non-existent" means NO evidence of ANY practices or procedures
- "Level 0" means basic/minimal practices exist (compliance with laws, informal procedures, basic identification)
- Always check Level 0 criteria before choosing "Non-existent"
- Use knowledge-search results to verify or enhance your assessment when available
- If there is ANY evidence of basic practices, choose Level 0 over Non-existent

2. MATERIALITY ASSESSMENT:
- Be GENEROUS with High materiality for:
  * Multi-country operations (3+ countries = High)
  * Consumer-facing businesses (direct customer interaction)
  * Community-impact operations (venues, clinics, local partnerships)
  * Environmental impact sectors (manufacturing, energy, transportation, events)
  * Digital platforms handling payments/data
- Default to High when in doubt for companies with significant operations

3. COMMENT QUALITY:
- When writing comments, you MUST quote directly from the documents. If you cannot find a direct quote, you MUST state 'No explicit mention of [topic] in provided documents' and then explain the indirect evidence, labelled as such.
- NEVER use inference phrases like {{ forbidden }} - these are FORBIDDEN
- ALWAYS quote specific text using quotation marks: "Document states: '[exact quote]'"
- Reference exact numbers, facts, or statements from the company information
- DO NOT make unsupported claims (e.g., employee counts unless stated)
- For borderline Level 0, explain WHY with specific evidence
- If no direct quote exists, format: "No explicit mention of [topic] in provided documents. However, [specific indirect evidence] indicates [conclusion]"
"""

DDQ_PROMPT_TEMPLATE = """
You are an ESG assessment expert. Using the ESG Risk Management Framework provided below, assess the company and fill out the Due Diligence Questionnaire.

{{ company_context }}
{{ evidence_text }}

CRITICAL LEVEL DEFINITIONS (read carefully before determining levels):
{% for area, non_existent, level_0 in level_definitions %}

{{ area }}:
- Non-existent: {{ non_existent }}
- Level 0: {{ level_0 }}
{% endfor %}

IMPORTANT: Before marking any area as "Non-existent", you MUST verify if Level 0 criteria are met. "Non-existent" means NO evidence of ANY practices, while "Level 0" means basic/minimal practices exist. When in doubt between Non-existent and Level 0, choose Level 0 if ANY basic procedures exist.

{% if materiality_signals %}
MATERIALITY SIGNALS DETECTED FOR THIS COMPANY (apply HIGH materiality to the affected areas):
{% for signal in materiality_signals %}
- {{ signal }}
{% endfor %}

{% endif %}
ESG Risk Management Framework:
{{ rmf_text }}

ASSESSMENT INSTRUCTIONS:

1. Use knowledge-search results (if provided) to verify information and fill gaps
2. For the Track Record section, use knowledge-search results to verify if there are any reported:
{% for label in track_record_labels %}
   - {{ label }}
{% endfor %}

3. For each area, determine:
{{ materiality_guidance }}
   - Level ({{ level_values | join(', ') }}) - CRITICAL: Check Level 0 criteria first before marking "Non-existent"
   - Comments explaining your assessment with specific evidence from company information OR knowledge-search results

4. In comments, cite sources with DIRECT QUOTES:
   - ALWAYS quote specific text from documents when available (e.g., "Document states: '200+ partner clinics across 3 provinces'")
   - Reference exact numbers, facts, or statements from the company information
   - Reference knowledge-search findings when used for verification
   - CRITICAL: NEVER use phrases like {{ forbidden }} - these are FORBIDDEN
   - If no direct quote exists, state: "No explicit mention of [topic] in provided documents. However, [specific indirect evidence] indicates [conclusion]"
   - DO NOT make unsupported claims (e.g., don't state employee count unless explicitly mentioned)

   EXAMPLES OF GOOD vs BAD COMMENTS:
   BAD: "It is reasonable to infer that the company has basic procedures in place"
   GOOD: "The document states: '18+ production partners', indicating engagement with supply chain partners"

   BAD: "Given the company's operations, it suggests compliance with local labour laws"
   GOOD: "No explicit mention of labour policies in provided documents. However, the company operates in 3 countries, which requires compliance with local labour laws in each jurisdiction, indicating Level 0 compliance"

5. SECTOR-SPECIFIC INDICATORS - Look for indirect evidence:
   - Supply chain risk management: mentions of partner networks, vendors, suppliers or production partners = Level 0
   - Community engagement and impact: strategic partnerships, sponsorships, government or tourism-board relationships = Level 0
   - Board structure and functioning: investment rounds with external investors, investor updates, mentions of a board = Level 0
   - Governance (general): seed/venture investors, legal counsel, multi-country compliance = governance framework exists
   - AML, KYC & KYB management: a digital platform handling payments, transactions or user data (even via third parties) = Level 0
   - Cyber security and data governance: any platform, app or system that collects, stores or processes user data = Level 0
   - ESG performance management & monitoring: managing a partner network or multi-country operations = limited programs = Level 0

6. EVIDENCE INTERPRETATION:
   - "No explicit mention" does NOT mean "Non-existent" - look for indirect evidence
   - If the company operates in multiple countries, assume basic compliance (Level 0) unless evidence suggests otherwise
   - If the company has external investors, assume basic governance (Level 0)
   - If the company mentions partnerships, assume stakeholder engagement (Level 0)
   - When in doubt between Non-existent and Level 0, choose Level 0 if ANY indirect evidence exists

7. BORDERLINE LEVEL 0 ASSESSMENTS:
   - If NO evidence of any risk consideration, management activity, digital infrastructure or payment handling exists for an area, use Non-existent
   - Always state in comments WHY it's Level 0 vs Non-existent with specific evidence

Return a JSON object with this exact structure. Every category MUST contain exactly the listed areas, in this order, with these exact area names:
{{ output_schema }}

Allowed values:
- "materiality": one of {{ materiality_values }}
- "level": one of {{ quoted_levels }}

Be thorough and accurate:
- Reference specific criteria from the framework in your comments
- Cite knowledge-search results when used to verify information
- Distinguish clearly between "Non-existent" (no evidence) and "Level 0" (basic practices exist)
- For Track Record, use knowledge-search results to provide specific details or confirm "None" if no issues found
- QUOTE DIRECTLY from company documents - use quotation marks for exact text
- DO NOT invent facts (e.g., employee counts) unless explicitly stated in documents
- For materiality, be generous with High ratings for multi-country, consumer-facing, or community-impact businesses
"""


def _mentions(text: str, terms: List[str]) -> List[str]:
    found = []
    for term in terms:
        if re.search(rf"\b{re.escape(term)}\b", text, flags=re.IGNORECASE):
            found.append(term)
    return found


def materiality_signals(profile: CompanyProfile) -> List[str]:
    """Deterministic High-materiality cues derived from the profile."""
    signals = []
    countries = profile.countries_of_operation
    if len(countries) >= MULTI_COUNTRY_THRESHOLD:
        signals.append(
            f"Operates in {len(countries)} countries ({', '.join(countries)}): 3+ countries = High materiality, "
            f"including Compliance with Laws & Regulations and Anti-Bribery and Corruption (ABC) Management"
        )

    narrative = " ".join(
        filter(None, [profile.sector, profile.sub_sector, profile.business_activities, profile.product_description])
    )
    consumer = _mentions(narrative, CONSUMER_FACING_TERMS)
    if consumer:
        signals.append(
            f"Consumer-facing business (mentions: {', '.join(consumer)}): High materiality for Consumer Protection"
        )
    environmental = _mentions(narrative, ENVIRONMENTAL_IMPACT_TERMS)
    if environmental:
        signals.append(
            f"Environmental impact sector (mentions: {', '.join(environmental)}): High materiality for "
            f"Environmental impact and Greenhouse gas emissions"
        )
    community = _mentions(narrative, COMMUNITY_FACING_TERMS)
    if community:
        signals.append(
            f"Community-facing operations (mentions: {', '.join(community)}): High materiality for "
            f"Community Engagement and Impact"
        )
    data = _mentions(narrative, DATA_PAYMENT_TERMS)
    if data:
        signals.append(
            f"Handles data or payments (mentions: {', '.join(data)}): High materiality for "
            f"Cyber Security and Data Governance and AML, KYC & KYB Management"
        )
    return signals


def ddq_output_schema() -> str:
    """JSON skeleton naming every required area per category."""
    item = {
        "area": None,
        "definition": "Brief definition",
        "materiality": "/".join(MATERIALITY_VALUES),
        "level": " | ".join(LEVEL_VALUES),
        "comments": "Detailed assessment comments",
    }
    skeleton = {
        category: [{**item, "area": area} for area in areas]
        for category, areas in CATEGORY_AREAS.items()
    }
    skeleton["trackRecord"] = {
        "regulatoryBreaches": "Detailed answer based on knowledge search and company information, or 'None' if no issues found",
        "supplyChainIssues": "Detailed answer based on knowledge search and company information, or 'None' if no issues found",
        "transparencyDisclosure": "Detailed answer based on knowledge search and company information, or 'None' if no issues found",
        "renewableEnergy": "Answer if applicable or 'N/A'",
    }
    return json.dumps(skeleton, indent=2)


def _quoted(values: List[str]) -> str:
    return ", ".join(f"\"{v}\"" for v in values)


def build_ddq_system_prompt() -> str:
    return prompt_env.from_string(DDQ_SYSTEM_PROMPT).render(forbidden=_quoted(FORBIDDEN_PHRASES))


def build_ddq_prompt(
    profile: CompanyProfile,
    rmf_text: str,
    evidence_text: str,
    extracted_text: str | None = None,
    max_document_chars: int = 5000,
) -> str:
    """Assemble the full DDQ user prompt. Deterministic for identical inputs."""
    return prompt_env.from_string(DDQ_PROMPT_TEMPLATE).render(
        company_context=render_company_context(profile, extracted_text, max_document_chars),
        evidence_text=evidence_text,
        level_definitions=[(area, non_existent, level_0) for area, (non_existent, level_0) in LEVEL_DEFINITIONS.items()],
        materiality_signals=materiality_signals(profile),
        rmf_text=rmf_text,
        track_record_labels=list(TRACK_RECORD_FIELDS.values()),
        materiality_guidance=MATERIALITY_GUIDANCE,
        materiality_values=_quoted(MATERIALITY_VALUES),
        level_values=LEVEL_VALUES,
        quoted_levels=_quoted(LEVEL_VALUES),
        forbidden=_quoted(FORBIDDEN_PHRASES),
        output_schema=ddq_output_schema(),
    )
