import copy
from pathlib import Path
from typing import Callable, List, Optional, Union

import pytest

from esg_ddq.config import Settings
from esg_ddq.core.llm.base import LLMProvider, LLMResponse, LLMUsage
from esg_ddq.core.llm.gateway import LLMGateway
from esg_ddq.models import CompanyProfile
from esg_ddq.rubric import CATEGORY_AREAS
from esg_ddq.services.prompts.research import RESEARCH_SYSTEM_PROMPT

RUBRIC_TEXT = "ESG RISK MANAGEMENT FRAMEWORK (test copy)\nLevel 0: basic practices.\nCategory C: minimal impacts."

# Areas the canonical payload rates High for a multi-country, consumer-facing health platform
HIGH_AREAS = {
    "Compliance with Laws & Regulations",
    "Anti-Bribery and Corruption (ABC) Management",
    "Consumer Protection",
    "Cyber Security and Data Governance",
    "AML, KYC & KYB Management",
    "Community Engagement and Impact",
}

Responder = Callable[[str, Optional[str]], Union[str, Exception]]


class FakeProvider(LLMProvider):
    """Scripted provider; records every call it receives."""

    def __init__(self, responder: Responder, name: str = "openai", model: str = "fake-model"):
        self._responder = responder
        self._name = name
        self._model = model
        self.calls: List[dict] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt, system_prompt=None, *, max_tokens=None, temperature=None, json_mode=False):
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "json_mode": json_mode,
        })
        content = self._responder(prompt, system_prompt)
        if isinstance(content, Exception):
            raise content
        return LLMResponse(content=content, provider=self.name, model=self.model, usage=LLMUsage(100, 50))

    def calls_with_system_prompt(self, system_prompt: str) -> List[dict]:
        return [c for c in self.calls if c["system_prompt"] == system_prompt]

    def assessment_calls(self) -> List[dict]:
        return [c for c in self.calls if c["system_prompt"] != RESEARCH_SYSTEM_PROMPT]


class StubKnowledgeBase:
    def __init__(self, text: str = RUBRIC_TEXT, error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.load_calls = 0

    async def load(self) -> str:
        self.load_calls += 1
        if self.error:
            raise self.error
        return self.text


def _rubric_item(area: str) -> dict:
    return {
        "area": area,
        "definition": f"How the company manages {area.lower()}",
        "materiality": "High" if area in HIGH_AREAS else "Medium",
        "level": "Level 0",
        "comments": f"No explicit mention of {area} in provided documents. However, the document states: "
                    f"'operations across Vietnam, Singapore and Thailand', indicating Level 0 compliance.",
    }


CANONICAL_DDQ = {
    **{category: [_rubric_item(area) for area in areas] for category, areas in CATEGORY_AREAS.items()},
    "trackRecord": {
        "regulatoryBreaches": "None",
        "supplyChainIssues": "None",
        "transparencyDisclosure": "None",
        "renewableEnergy": "N/A",
    },
}

CANONICAL_IM = {
    "companyName": "Acme Health",
    "productActivitySolution": "Telemedicine platform connecting patients with licensed doctors.",
    "riskCategory": "Category B",
    "grievanceRedressMechanism": "Currently non-existent",
    "sector": "Healthcare",
    "subSector": "Telemedicine",
    "countriesOfOperation": "Vietnam, Singapore, Thailand",
    "numberOfEmployees": "50-100",
    "currentRisks": ["Patient data protection\n  * As identified in the DDQ under Cyber Security and Data Governance"],
    "currentOpportunities": ["Access to care in underserved areas"],
    "longTermRisks": ["Regulatory divergence across three jurisdictions"],
    "longTermOpportunities": ["Regional expansion of primary care"],
    "foundersCommitment": "Founders stated commitment to an ESG policy.",
    "stakeholderConsultations": "No explicit mention of stakeholder consultations in provided documents.",
    "potentialGrievances": "Misdiagnosis complaints from patients.",
    "riskOfRetaliation": "Low.",
    "gaps": ["No formal ESG Policy (DDQ: ESG Policy, Non-existent)"],
    "actionPlan": ["Adopt an ESG Policy - Founders - Board-approved policy - 6 months"],
    "estimatedCost": "Not available",
    "timeframe": "12 months",
    "limitations": ["1. Relies on self-reported data."],
}


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        anthropic_api_key="",
        research_delay_seconds=0,
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def golden_profile() -> CompanyProfile:
    return CompanyProfile(
        company_name="Acme Health",
        sector="Healthcare",
        sub_sector="Telemedicine",
        countries_of_operation=["Vietnam", "Singapore", "Thailand"],
        number_of_employees="50-100",
        business_activities="Acme Health runs a telemedicine platform with 200+ partner clinics and a patient app.",
        product_description="Video consultations and e-prescriptions for patients, paid through in-app payments.",
    )


@pytest.fixture
def canonical_ddq() -> dict:
    return copy.deepcopy(CANONICAL_DDQ)


@pytest.fixture
def canonical_im() -> dict:
    return copy.deepcopy(CANONICAL_IM)


@pytest.fixture
def make_provider():
    def _make(responder: Responder, name: str = "openai") -> FakeProvider:
        return FakeProvider(responder, name=name)
    return _make


@pytest.fixture
def make_gateway(test_settings):
    def _make(provider: FakeProvider) -> LLMGateway:
        return LLMGateway(cfg=test_settings, providers={provider.name: provider})
    return _make


@pytest.fixture
def stub_kb() -> StubKnowledgeBase:
    return StubKnowledgeBase()


@pytest.fixture
def make_stub_kb():
    return StubKnowledgeBase
