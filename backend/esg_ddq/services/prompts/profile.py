"""Company-profile extraction prompts (document text -> CompanyProfile JSON)."""
from typing import List

from esg_ddq.services.prompts import prompt_env

REQUIRED_FIELDS_LINE = (
    "companyName, sector, subSector, countriesOfOperation, numberOfEmployees, businessActivities, productDescription"
)

PROFILE_SYSTEM_PROMPT = f"""You are an expert at extracting structured information from company documents, pitch decks, financial reports, and business descriptions.

CRITICAL REQUIREMENTS - You MUST extract COMPLETE information:
1. ALL required fields MUST be populated with REAL data from the text
2. Required fields: {REQUIRED_FIELDS_LINE} (countriesOfOperation needs at least 1 entry)
3. Do NOT return empty strings, "Not specified", or placeholder values for required fields
4. Read the ENTIRE text carefully - information may be scattered throughout
5. For businessActivities and productDescription, provide detailed descriptions (at least 50 characters each)
6. Return valid JSON with ALL fields present - use empty strings only for optional fields (currentESGPractices, policies, complianceStatus) if not found"""

PROFILE_RETRY_SYSTEM_PROMPT = (
    "You are an expert at extracting structured information. The previous extraction was incomplete. "
    "You MUST extract ALL required fields with real data from the text. Do NOT return empty strings for: "
    f"{REQUIRED_FIELDS_LINE}."
)

PROFILE_PROMPT_TEMPLATE = """
You are an expert at extracting company information from business documents. Analyze the following text COMPLETELY and extract ALL relevant company details.

Text to analyze:
{{ text }}

REQUIRED: Extract and return a JSON object with this EXACT structure. Do NOT return empty strings, "Not specified", or placeholder values unless the text contains NO information about that field:

{
  "companyName": "Full company name - REQUIRED",
  "sector": "Primary sector (e.g., 'Healthcare', 'FinTech', 'EduTech', 'ClimateTech') - REQUIRED",
  "subSector": "Specific sub-sector (e.g., 'Primary Care and Homecare Services', 'Digital Payments') - REQUIRED",
  "countriesOfOperation": ["Country 1", "Country 2"],
  "numberOfEmployees": "Number or range (e.g., '<30', '50-100', 'approximately 50') - REQUIRED",
  "businessActivities": "Detailed description of what the company does, its business model and operations - REQUIRED",
  "productDescription": "Main product or service, target customers and value proposition - REQUIRED",
  "currentESGPractices": "Any ESG practices, policies, or initiatives mentioned (empty string if none)",
  "policies": "Any company policies mentioned (empty string if none)",
  "complianceStatus": "Compliance status or regulatory information if mentioned (empty string if none)"
}

EXTRACTION RULES:

1. COMPANY NAME: search headers, titles, "About [Company]", "[Company] Pte Ltd"; use the full official name.
2. SECTOR: infer from business descriptions ("healthcare startup" -> "Healthcare", "fintech platform" -> "FinTech").
3. SUB-SECTOR: the specific niche within the sector.
4. COUNTRIES OF OPERATION: every country after "operates in", "based in", "headquartered in", "presence in", "serving"; always an array, even for one country ("Singapore-based" -> ["Singapore"]).
5. NUMBER OF EMPLOYEES: "team of X", "X employees", "workforce", "staff"; keep ranges and approximations as written.
6. BUSINESS ACTIVITIES: business model, operations and how the company makes money, at least 2-3 sentences of real detail.
7. PRODUCT DESCRIPTION: what is sold, to whom and why, at least 2-3 sentences of real detail.
8. OPTIONAL FIELDS may be empty strings when the text is silent.

VALIDATION CHECKLIST - before returning JSON verify that every required field is present, non-empty and taken from the text, that countriesOfOperation has at least ONE country, and that businessActivities and productDescription are at least 50 characters.
{% if failed_fields %}

RETRY ATTEMPT - Previous extraction was incomplete. The following fields were missing or invalid:
{% for failure in failed_fields %}
- {{ failure }}
{% endfor %}

You MUST extract ALL of these fields from the text. Read the text more carefully and extract every piece of information. Do NOT return empty values for required fields.
{% endif %}
"""


def build_profile_prompt(text: str, failed_fields: List[str] | None = None) -> str:
    return prompt_env.from_string(PROFILE_PROMPT_TEMPLATE).render(text=text, failed_fields=failed_fields or [])
