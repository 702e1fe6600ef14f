import json

from esg_ddq.models import CompanyProfile, DDQResult
from esg_ddq.rubric import CATEGORY_AREAS, RISK_CATEGORY_VALUES
from esg_ddq.services.prompts import render_company_context
from esg_ddq.services.prompts.ddq import build_ddq_prompt, build_ddq_system_prompt, materiality_signals
from esg_ddq.services.prompts.im import build_im_prompt, build_im_system_prompt
from esg_ddq.services.prompts.profile import build_profile_prompt

from conftest import RUBRIC_TEXT

EVIDENCE = "\n\n=== KNOWLEDGE SEARCH RESULTS (External Verification) ===\nNo additional information found through knowledge search.\n"


def test_multi_country_consumer_profile_gets_high_signals(golden_profile):
    signals = materiality_signals(golden_profile)

    assert any("3+ countries = High" in s for s in signals)
    assert any("Consumer Protection" in s for s in signals)
    assert any("Community Engagement and Impact" in s for s in signals)
    assert any("Cyber Security and Data Governance" in s for s in signals)


def test_single_country_b2b_profile_has_no_multi_country_signal():
    profile = CompanyProfile(
        company_name="Ledgerly",
        sector="Software",
        sub_sector="Accounting tools",
        countries_of_operation=["Singapore"],
        number_of_employees="<30",
        business_activities="Sells bookkeeping software licenses to accounting firms under annual contracts.",
        product_description="Desktop bookkeeping software licensed to accounting firms for their own staff.",
    )
    assert not any("countries" in s for s in materiality_signals(profile))


def test_ddq_prompt_contains_every_section(golden_profile):
    prompt = build_ddq_prompt(golden_profile, RUBRIC_TEXT, EVIDENCE)

    assert "- Name: Acme Health" in prompt
    assert "- Countries of Operation: Vietnam, Singapore, Thailand" in prompt
    assert "KNOWLEDGE SEARCH RESULTS" in prompt
    assert "CRITICAL LEVEL DEFINITIONS" in prompt
    assert "MATERIALITY SIGNALS DETECTED FOR THIS COMPANY" in prompt
    assert "3+ countries = High" in prompt
    assert RUBRIC_TEXT in prompt
    for areas in CATEGORY_AREAS.values():
        for area in areas:
            assert area in prompt


def test_ddq_prompt_is_deterministic(golden_profile):
    first = build_ddq_prompt(golden_profile, RUBRIC_TEXT, EVIDENCE, "Pitch deck text")
    second = build_ddq_prompt(golden_profile, RUBRIC_TEXT, EVIDENCE, "Pitch deck text")
    assert first == second


def test_document_excerpt_is_truncated(golden_profile):
    document = "A" * 5000 + "TAIL_MARKER"
    context = render_company_context(golden_profile, document, max_document_chars=5000)

    assert "A" * 5000 in context
    assert "TAIL_MARKER" not in context
    assert "Additional Information from Documents:" in context


def test_no_document_section_without_text(golden_profile):
    assert "Additional Information from Documents" not in render_company_context(golden_profile)


def test_system_prompts_forbid_hedging():
    assert '"likely"' in build_ddq_system_prompt()
    assert '"likely"' in build_im_system_prompt()


def test_profile_retry_prompt_lists_failed_fields():
    first = build_profile_prompt("Acme Health is a telemedicine company.")
    retry = build_profile_prompt("Acme Health is a telemedicine company.", ["sector is missing or empty"])

    assert "RETRY ATTEMPT" not in first
    assert "RETRY ATTEMPT" in retry
    assert "- sector is missing or empty" in retry


def test_im_prompt_embeds_ddq_and_categories(golden_profile, canonical_ddq):
    ddq = DDQResult.model_validate(canonical_ddq)
    prompt = build_im_prompt(golden_profile, ddq, RUBRIC_TEXT)

    assert json.dumps(ddq.to_wire(), indent=2, ensure_ascii=False) in prompt
    for value in RISK_CATEGORY_VALUES:
        assert value in prompt
    assert '"companyName": "Acme Health"' in prompt
    assert "Current ESG Practices" not in prompt
