# backend/esg_ddq/services/ddq_engine.py
"""ESG Due Diligence Questionnaire generation.

Pipeline:
1. Load the Risk Management Framework (fatal if unavailable)
2. Gather knowledge-search evidence, both batches concurrently (never fatal)
3. Assemble the DDQ prompt
4. call_json on the primary provider
5. Validate against the rubric and build the DDQResult

LLM and extraction errors propagate unchanged; there is no retry here.
"""
import time
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from esg_ddq.config import Settings, settings as default_settings
from esg_ddq.core.knowledge_base import KnowledgeBaseLoader
from esg_ddq.core.llm.gateway import LLMGateway
from esg_ddq.exceptions import ESGPipelineError, SchemaMismatch
from esg_ddq.models import CompanyProfile, DDQResult
from esg_ddq.services.evidence import EvidenceGatherer, format_evidence_for_prompt
from esg_ddq.services.prompts.ddq import build_ddq_prompt, build_ddq_system_prompt
from esg_ddq.services.validator import ValidationResult, validate_ddq_output
from esg_ddq.utils.logging import logger
from esg_ddq.utils.metrics import ASSESSMENT_LATENCY_SECONDS, ASSESSMENTS_TOTAL
from esg_ddq.utils.token_utils import warn_if_over_budget


def enforce_validation(
    stage: str,
    company_name: str,
    validation: ValidationResult,
    strict: bool,
) -> None:
    """Raise SchemaMismatch in strict mode, otherwise log and continue."""
    for warning in validation.warnings:
        logger.warning(f"{stage} output warning: {warning}", extra={"stage": stage, "company_name": company_name})

    if validation.valid:
        return

    messages = validation.error_messages()
    if strict:
        raise SchemaMismatch(
            f"{stage} output does not match the expected structure ({len(messages)} problem(s))",
            errors=messages,
            stage=stage,
            company_name=company_name,
            validation_errors=messages,
        )
    logger.warning(
        f"{stage} output failed validation; returning it unchanged",
        extra={"stage": stage, "company_name": company_name, "validation_errors": messages}
    )


def build_result(model_cls, stage: str, company_name: str, payload: Dict[str, Any]):
    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as e:
        raise SchemaMismatch(
            f"{stage} output could not be parsed into {model_cls.__name__}",
            errors=[f"{'/'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
            stage=stage,
            company_name=company_name,
        ) from e


class DDQEngine:
    """Produces a DDQResult for one company. Holds no per-request state."""

    def __init__(
        self,
        gateway: LLMGateway,
        knowledge_base: KnowledgeBaseLoader,
        gatherer: Optional[EvidenceGatherer] = None,
        cfg: Optional[Settings] = None,
    ):
        self.gateway = gateway
        self.knowledge_base = knowledge_base
        self.settings = cfg or default_settings
        self.gatherer = gatherer or EvidenceGatherer(gateway, self.settings)

    async def generate(self, profile: CompanyProfile, extracted_text: Optional[str] = None) -> DDQResult:
        start = time.time()
        company = profile.company_name
        logger.info(
            f"Generating DDQ for {company}",
            extra={
                "company_name": company,
                "sector": profile.sector,
                "country_count": len(profile.countries_of_operation),
                "extracted_text_length": len(extracted_text or ""),
            }
        )

        try:
            rmf_text = await self.knowledge_base.load()

            evidence = await self.gatherer.gather_all(company)
            logger.info(
                f"Evidence gathered: {evidence.total_results()} results, {len(evidence.failures)} failed queries",
                extra={"company_name": company}
            )

            prompt = build_ddq_prompt(
                profile,
                rmf_text,
                format_evidence_for_prompt(evidence),
                extracted_text,
                self.settings.ddq_extracted_text_chars,
            )
            warn_if_over_budget("DDQ", prompt, self.settings.llm_max_input_tokens)

            payload = await self.gateway.call_json(prompt, build_ddq_system_prompt())

            enforce_validation("DDQ", company, validate_ddq_output(payload), self.settings.strict_output_validation)
            result = build_result(DDQResult, "DDQ", company, payload)
        except ESGPipelineError as e:
            ASSESSMENTS_TOTAL.labels(kind="ddq", outcome=type(e).__name__).inc()
            logger.error(
                f"DDQ generation failed: {e}",
                extra={"company_name": company, "error_type": type(e).__name__, **e.context}
            )
            raise

        elapsed = time.time() - start
        ASSESSMENTS_TOTAL.labels(kind="ddq", outcome="success").inc()
        ASSESSMENT_LATENCY_SECONDS.labels(kind="ddq").observe(elapsed)
        logger.info(
            f"DDQ generated for {company} in {elapsed:.1f}s",
            extra={
                "company_name": company,
                "area_counts": {k: len(v) for k, v in result.category_items().items()},
            }
        )
        return result
