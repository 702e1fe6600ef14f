"""Knowledge-search prompts used by the evidence gatherer."""
from esg_ddq.services.prompts import prompt_env

RESEARCH_SYSTEM_PROMPT = (
    "You are a research assistant that searches for and summarizes information. Provide accurate, factual "
    "information with context from your knowledge base. Cite what you find or state clearly if nothing is found. "
    "Be specific about dates, events, and sources when available."
)

NO_INFORMATION_SENTINEL = "No relevant information found in knowledge base."

RESEARCH_PROMPT_TEMPLATE = """Based on your knowledge, search for information about: "{{ query }}".

Provide specific, verifiable facts including:
- Company name and context
- Specific dates, incidents, or events (if known)
- Regulatory actions or breaches (if any)
- Public disclosures or reports
- News articles or official statements

Focus on:
- ESG-related information
- Regulatory compliance issues
- Supply chain problems
- Transparency and disclosure
- Public records or reports

If you find relevant information, provide details with context. If no information is found in your knowledge base, state clearly: "{{ sentinel }}"

Be specific and factual. Include dates, locations, or context when available."""


def build_research_prompt(query: str) -> str:
    return prompt_env.from_string(RESEARCH_PROMPT_TEMPLATE).render(query=query, sentinel=NO_INFORMATION_SENTINEL)
