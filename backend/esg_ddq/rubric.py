# backend/esg_ddq/rubric.py
"""The fixed ESG DDQ rubric.

Area names, their order per category, and the rating scales are fixed by the
Risk Management Framework. Prompts, the output validator and the exporters all
read from here so the three never drift apart.
"""
from enum import Enum
from typing import Dict, List


class Materiality(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    NON_EXISTENT = "Non-existent"


class Level(str, Enum):
    LEVEL_0 = "Level 0"
    LEVEL_1 = "Level 1"
    LEVEL_2 = "Level 2"
    LEVEL_3 = "Level 3"
    NON_EXISTENT = "Non-existent"


class RiskCategory(str, Enum):
    """Ordered by severity: C < B < B+ < A."""
    C = "Category C"
    B = "Category B"
    B_PLUS = "Category B+"
    A = "Category A"


MATERIALITY_VALUES = [m.value for m in Materiality]
LEVEL_VALUES = [lvl.value for lvl in Level]
RISK_CATEGORY_VALUES = [c.value for c in RiskCategory]

# Result field -> display title, in document order
CATEGORY_TITLES: Dict[str, str] = {
    "riskManagement": "Risk Management Capacity",
    "environment": "Environment",
    "social": "Social",
    "governance": "Governance",
}

CATEGORY_AREAS: Dict[str, List[str]] = {
    "riskManagement": [
        "ESG Policy",
        "ESG Risk and Opportunity Identification",
        "ESG Reporting",
        "ESG Performance Management & Monitoring",
    ],
    "environment": [
        "Environmental impact",
        "Greenhouse gas emissions",
    ],
    "social": [
        "Labour Standards",
        "Occupational Health & Safety Standards",
        "Child and Forced Labour Policy",
        "Community Engagement and Impact",
        "Consumer Protection",
        "Supply chain risk management",
    ],
    "governance": [
        "Commitment to Corporate Governance (CG)",
        "Board Structure and Functioning",
        "Compliance with Laws & Regulations",
        "Anti-Bribery and Corruption (ABC) Management",
        "AML, KYC & KYB Management",
        "GRM & PPM",
        "Cyber Security and Data Governance",
    ],
}

TRACK_RECORD_FIELDS: Dict[str, str] = {
    "regulatoryBreaches": "Regulatory breaches or ESG-related non-compliances",
    "supplyChainIssues": "Supply chain issues with respect to labour and working conditions",
    "transparencyDisclosure": "Transparency & disclosure issues (qualified audit opinions, financial restatements)",
    "renewableEnergy": "Renewable energy details (if applicable)",
}

# Per area: (Non-existent, Level 0). Keeps the model from skipping straight to "Non-existent".
LEVEL_DEFINITIONS: Dict[str, tuple] = {
    "ESG Policy": (
        "No policy AND no ESG procedures at all",
        "The company has no policy, but some ESG procedures in place (e.g., clearly documented employment "
        "contracts, transparent employment practices, responsible consumption of materials)",
    ),
    "ESG Risk and Opportunity Identification": (
        "No identification or assessment of ESG risks",
        "Basic identification and assessment of ESG risks but limited to a few activities",
    ),
    "ESG Reporting": (
        "No ESG reporting at all",
        "Minimal amounts of communication and ESG reporting are provided, usually or entirely initiated by the fund manager",
    ),
    "ESG Performance Management & Monitoring": (
        "No programs or activities to manage and monitor ESG risks",
        "Limited programs or activities to manage and monitor ESG risks",
    ),
    "Environmental impact": (
        "No identification of environmental risks",
        "The company identifies risk where its operations and value chain may pollute (e.g., pollute water, air, "
        "or land; increase waste generation; generate hazardous materials), use resources inefficiently, or threaten "
        "biodiversity. The company has and complies with any and all required environmental permits or licenses as "
        "per national law",
    ),
    "Greenhouse gas emissions": (
        "No identification or tracking of GHG emissions",
        "The company has identified the greenhouse gas emission intensity of its operations, and value chain to the extent possible",
    ),
    "Labour Standards": (
        "No compliance with local labour laws or HR procedures",
        "The company complies with local labour laws. The company intends to establish human resources policies "
        "and procedures and may have already implemented them informally",
    ),
    "Occupational Health & Safety Standards": (
        "No OHS procedures",
        "Procedures are implemented that identify and mitigate potential hazards to workers, particularly those that "
        "may be life-threatening. The company is compliant with all relevant OH&S laws and regulations",
    ),
    "Child and Forced Labour Policy": (
        "No policy at all",
        "The company has a basic policy in place to manage and establish the current or future risk of child and forced labour",
    ),
    "Community Engagement and Impact": (
        "No stakeholder identification or engagement",
        "The company identifies stakeholders that may be affected by its activities. It has procedures in place to "
        "identify and manage potential risks to community/stakeholder health and safety, and cultural heritage (where relevant)",
    ),
    "Consumer Protection": (
        "No consumer protection measures",
        "The company complies with relevant consumer protection laws",
    ),
    "Supply chain risk management": (
        "No engagement with supply chain partners",
        "The company engages with partners to be better informed of its supply chain and identify potential risks therein",
    ),
    "Commitment to Corporate Governance (CG)": (
        "No governance structure",
        "There is a charter with basic corporate governance articles including wording on minority shareholder "
        "protection. Roles & responsibilities for the company are defined with clear decision-making and authority "
        "limits. Information is disclosed regularly",
    ),
    "Board Structure and Functioning": (
        "No oversight or control processes",
        "The company has informal oversight and control processes in place",
    ),
    "Compliance with Laws & Regulations": (
        "No compliance mechanisms",
        "Compliance with applicable legislation and regulations",
    ),
    "Anti-Bribery and Corruption (ABC) Management": (
        "No anti-bribery processes",
        "The company has anti-bribery and corruption processes in place and intends to establish a policy",
    ),
    "AML, KYC & KYB Management": (
        "No AML/KYC/KYB checks",
        "The company engages in ad-hoc Know Your Customer (KYC), Anti-Money Laundering (AML) and Know Your "
        "Business (KYB) checks. Incidents are reported to the fund manager",
    ),
    "GRM & PPM": (
        "No grievance mechanism",
        "The company operates a grievance mechanism to receive and facilitate resolution of the concerns and "
        "complaints of people who believe they have been affected by the company's business activities in respect "
        "to ESG matters. This is readily accessible in relevant languages on the company's website and also includes "
        "information about and a link to the Project Affected People's Mechanism website",
    ),
    "Cyber Security and Data Governance": (
        "No security measures",
        "Systems and security patches are up-to-date, and basic cyber threat and data security risk governance "
        "elements have been established",
    ),
}

RISK_CATEGORY_DEFINITIONS: Dict[str, str] = {
    RiskCategory.C.value: (
        "Minimal or no adverse ESG impacts. Minimal impacts can be mitigated with well-known, cost-effective measures."
    ),
    RiskCategory.B.value: (
        "Limited number of potentially adverse ESG impacts. Impacts are not unprecedented, few if any are "
        "irreversible or cumulative, can be managed using good practice."
    ),
    RiskCategory.B_PLUS.value: (
        "Limited number of potentially adverse ESG impacts but may pose higher risk. Can be managed with external support."
    ),
    RiskCategory.A.value: (
        "Significant adverse ESG impacts that are irreversible, cumulative, diverse, or unprecedented. EXCLUDED from investment."
    ),
}

# Hedging language the assessor is told never to use in comments
FORBIDDEN_PHRASES: List[str] = [
    "it is reasonable to infer",
    "suggests",
    "likely",
    "may indicate",
    "it is assumed",
]


def all_areas() -> List[str]:
    return [area for areas in CATEGORY_AREAS.values() for area in areas]
