# backend/esg_ddq/services/im_engine.py
"""Investment Memo generation.

Second stage of the assessment workflow: the memo is written from a
completed DDQ, so an absent or empty DDQResult is rejected before any
framework load or LLM call.
"""
import time
from typing import Optional

from esg_ddq.config import Settings, settings as default_settings
from esg_ddq.core.knowledge_base import KnowledgeBaseLoader
from esg_ddq.core.llm.gateway import LLMGateway
from esg_ddq.exceptions import ESGPipelineError, MissingDDQResultError
from esg_ddq.models import CompanyProfile, DDQResult, IMResult
from esg_ddq.services.ddq_engine import build_result, enforce_validation
from esg_ddq.services.prompts.im import build_im_prompt, build_im_system_prompt
from esg_ddq.services.validator import validate_im_output
from esg_ddq.utils.logging import logger
from esg_ddq.utils.metrics import ASSESSMENT_LATENCY_SECONDS, ASSESSMENTS_TOTAL
from esg_ddq.utils.token_utils import warn_if_over_budget


def require_ddq_result(ddq_result: Optional[DDQResult], company_name: str) -> DDQResult:
    if ddq_result is None:
        raise MissingDDQResultError(
            "DDQ result is required to generate the Investment Memo. Generate the DDQ first.",
            company_name=company_name,
        )
    if not any(ddq_result.category_items().values()):
        raise MissingDDQResultError(
            "DDQ result contains no assessed areas. Generate the DDQ first.",
            company_name=company_name,
        )
    return ddq_result


class IMEngine:
    def __init__(
        self,
        gateway: LLMGateway,
        knowledge_base: KnowledgeBaseLoader,
        cfg: Optional[Settings] = None,
    ):
        self.gateway = gateway
        self.knowledge_base = knowledge_base
        self.settings = cfg or default_settings

    async def generate(
        self,
        profile: CompanyProfile,
        ddq_result: Optional[DDQResult],
        extracted_text: Optional[str] = None,
    ) -> IMResult:
        """Write the memo for `profile` from its completed DDQ.

        Raises:
            MissingDDQResultError: ddq_result is None or has no assessed areas
            KnowledgeBaseUnavailable: framework text could not be loaded
            SchemaMismatch: strict validation rejected the model output
            LLMError / OutputExtractionError subclasses: propagated from the gateway
        """
        start = time.time()
        company = profile.company_name

        try:
            ddq_result = require_ddq_result(ddq_result, company)
            logger.info(f"Generating Investment Memo for {company}", extra={"company_name": company})

            rmf_text = await self.knowledge_base.load()
            prompt = build_im_prompt(
                profile,
                ddq_result,
                rmf_text,
                extracted_text,
                self.settings.ddq_extracted_text_chars,
            )
            warn_if_over_budget("IM", prompt, self.settings.llm_max_input_tokens)

            payload = await self.gateway.call_json(prompt, build_im_system_prompt())

            enforce_validation("IM", company, validate_im_output(payload), self.settings.strict_output_validation)
            result = build_result(IMResult, "IM", company, payload)
        except ESGPipelineError as e:
            ASSESSMENTS_TOTAL.labels(kind="im", outcome=type(e).__name__).inc()
            logger.error(
                f"IM generation failed: {e}",
                extra={"company_name": company, "error_type": type(e).__name__, **e.context}
            )
            raise

        elapsed = time.time() - start
        ASSESSMENTS_TOTAL.labels(kind="im", outcome="success").inc()
        ASSESSMENT_LATENCY_SECONDS.labels(kind="im").observe(elapsed)
        logger.info(
            f"Investment Memo generated for {company} in {elapsed:.1f}s",
            extra={"company_name": company, "risk_category": result.risk_category}
        )
        return result
