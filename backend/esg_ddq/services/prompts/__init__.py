"""Prompt templates for the assessment pipeline.

Every prompt is a jinja2 template rendered with StrictUndefined, so a missing
variable fails at assembly time rather than producing a silently blank block.
"""
from jinja2 import Environment, StrictUndefined

from esg_ddq.models import CompanyProfile

prompt_env = Environment(
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)

COMPANY_CONTEXT_TEMPLATE = """
Company Information:
- Name: {{ profile.company_name }}
- Sector: {{ profile.sector }}
- Sub-sector: {{ profile.sub_sector }}
- Countries of Operation: {{ profile.countries_of_operation | join(', ') }}
- Number of Employees: {{ profile.number_of_employees }}
- Business Activities: {{ profile.business_activities }}
- Product/Service: {{ profile.product_description }}
{% if include_practices %}
{% if profile.current_esg_practices %}
- Current ESG Practices: {{ profile.current_esg_practices }}
{% endif %}
{% if profile.policies %}
- Policies: {{ profile.policies }}
{% endif %}
{% if profile.compliance_status %}
- Compliance Status: {{ profile.compliance_status }}
{% endif %}
{% if profile.additional_info %}
- Additional Information: {{ profile.additional_info }}
{% endif %}
{% endif %}
{% if document_excerpt %}

Additional Information from Documents:
{{ document_excerpt }}
{% endif %}
"""


def render_company_context(
    profile: CompanyProfile,
    extracted_text: str | None = None,
    max_document_chars: int = 5000,
    include_practices: bool = True,
) -> str:
    """Profile fields plus the leading slice of the extracted document text."""
    excerpt = extracted_text[:max_document_chars] if extracted_text else ""
    return prompt_env.from_string(COMPANY_CONTEXT_TEMPLATE).render(
        profile=profile,
        document_excerpt=excerpt,
        include_practices=include_practices,
    )


__all__ = ["prompt_env", "render_company_context"]
