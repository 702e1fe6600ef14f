# backend/esg_ddq/services/profile_extractor.py
"""Builds a CompanyProfile from uploaded document text.

The assessment engines take profile completeness as a precondition; this is
where it is enforced. The model gets a bounded number of attempts; a retry
carries the list of fields that failed validation on the previous attempt.
"""
import time
from typing import Any, Dict, List, Optional

from esg_ddq.config import Settings, settings as default_settings
from esg_ddq.core.llm.gateway import LLMGateway
from esg_ddq.exceptions import LLMError, OutputExtractionError, ValidationIncomplete
from esg_ddq.models import CompanyProfile
from esg_ddq.services.prompts.profile import (
    PROFILE_RETRY_SYSTEM_PROMPT,
    PROFILE_SYSTEM_PROMPT,
    build_profile_prompt,
)
from esg_ddq.utils.logging import logger
from esg_ddq.utils.metrics import ASSESSMENTS_TOTAL

MIN_NARRATIVE_CHARS = 50
PLACEHOLDER_VALUES = {"not specified", "n/a", "unknown"}

# Wire keys of the required profile fields
REQUIRED_TEXT_FIELDS = ["companyName", "sector", "subSector", "numberOfEmployees"]
REQUIRED_NARRATIVE_FIELDS = ["businessActivities", "productDescription"]
OPTIONAL_FIELDS = ["currentESGPractices", "policies", "complianceStatus", "additionalInfo"]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_profile_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce common model slips: comma-joined countries, null or blank optionals."""
    normalized = dict(data)
    countries = normalized.get("countriesOfOperation")
    if isinstance(countries, str):
        countries = [c for c in (part.strip() for part in countries.split(",")) if c]
    if isinstance(countries, list):
        normalized["countriesOfOperation"] = [str(c).strip() for c in countries if str(c).strip()]
    for key in OPTIONAL_FIELDS:
        if not _text(normalized.get(key)):
            normalized[key] = None
    return normalized


def find_missing_fields(data: Dict[str, Any]) -> List[str]:
    """Human-readable problems with the required fields; empty when complete."""
    problems = []
    for key in REQUIRED_TEXT_FIELDS:
        value = _text(data.get(key))
        if not value or value.lower() in PLACEHOLDER_VALUES:
            problems.append(f"{key} is missing or empty")

    countries = data.get("countriesOfOperation")
    if not isinstance(countries, list) or not countries:
        problems.append("countriesOfOperation is missing or empty (need at least 1 country)")

    for key in REQUIRED_NARRATIVE_FIELDS:
        value = _text(data.get(key))
        if len(value) < MIN_NARRATIVE_CHARS:
            problems.append(
                f"{key} is missing or too short (need at least {MIN_NARRATIVE_CHARS} characters, got {len(value)})"
            )
    return problems


class ProfileExtractor:
    def __init__(self, gateway: LLMGateway, cfg: Optional[Settings] = None):
        self.gateway = gateway
        self.settings = cfg or default_settings

    async def extract(self, text: str) -> CompanyProfile:
        """Extract a complete CompanyProfile from document text.

        Raises:
            ValidationIncomplete: required fields still missing after the final attempt
            LLMError / OutputExtractionError subclasses: the final attempt's gateway failure
        """
        start = time.time()
        excerpt = text[: self.settings.profile_extraction_chars]
        max_attempts = max(1, self.settings.profile_extraction_max_attempts)
        failed_fields: List[str] = []

        logger.info(
            "Extracting company profile from text",
            extra={"text_length": len(text), "truncated": len(text) > len(excerpt), "max_attempts": max_attempts}
        )

        for attempt in range(1, max_attempts + 1):
            is_retry = bool(failed_fields)
            prompt = build_profile_prompt(excerpt, failed_fields)
            system_prompt = PROFILE_RETRY_SYSTEM_PROMPT if is_retry else PROFILE_SYSTEM_PROMPT
            logger.info(f"Extraction attempt {attempt}/{max_attempts}", extra={"retry_with_diagnostics": is_retry})

            try:
                payload = await self.gateway.call_json(prompt, system_prompt)
            except (LLMError, OutputExtractionError) as e:
                if attempt >= max_attempts:
                    ASSESSMENTS_TOTAL.labels(kind="profile", outcome=type(e).__name__).inc()
                    raise
                logger.warning(
                    f"Extraction attempt {attempt} failed, retrying: {e}",
                    extra={"error_type": type(e).__name__}
                )
                failed_fields = []
                continue

            payload = normalize_profile_payload(payload)
            failed_fields = find_missing_fields(payload)
            if not failed_fields:
                profile = CompanyProfile.model_validate(payload)
                ASSESSMENTS_TOTAL.labels(kind="profile", outcome="success").inc()
                logger.info(
                    f"Validation passed on attempt {attempt}",
                    extra={
                        "company_name": profile.company_name,
                        "extraction_time_ms": int((time.time() - start) * 1000),
                    }
                )
                return profile

            logger.warning(
                f"Validation failed on attempt {attempt}",
                extra={"validation_errors": failed_fields}
            )

        ASSESSMENTS_TOTAL.labels(kind="profile", outcome="ValidationIncomplete").inc()
        raise ValidationIncomplete(
            "Could not extract complete company information. Missing or incomplete: "
            f"{', '.join(failed_fields)}. Please ensure the document contains clear company details and try again.",
            missing_fields=failed_fields,
            attempts=max_attempts,
        )
