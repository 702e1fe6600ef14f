# backend/esg_ddq/services/evidence.py
"""Knowledge-search evidence gathering.

Each topic becomes one LLM "research" query. A query that fails is recorded
as an empty SearchResults plus an EvidenceFailure entry; it never aborts the
batch. Queries inside a batch run sequentially with a short pause between
them, while the track-record and practice batches run concurrently.
"""
import asyncio
from typing import Awaitable, Callable, Iterable, List, Optional, Union

from esg_ddq.config import Settings, settings as default_settings
from esg_ddq.core.llm.gateway import LLMGateway
from esg_ddq.exceptions import EvidenceQueryFailure
from esg_ddq.models import EvidenceBundle, EvidenceFailure, SearchResult, SearchResults
from esg_ddq.services.prompts.research import RESEARCH_SYSTEM_PROMPT, build_research_prompt
from esg_ddq.utils.logging import logger
from esg_ddq.utils.metrics import EVIDENCE_QUERIES_TOTAL

TRACK_RECORD_TOPICS = [
    "regulatory breaches ESG compliance violations",
    "supply chain violations labor issues",
    "financial audit qualified opinion restatement",
    "ESG reporting sustainability disclosure",
    "transparency disclosure public records",
]

PRACTICE_TOPICS = [
    "ESG policy sustainability practices",
    "environmental policy climate action",
    "social responsibility labor standards",
    "governance policies board structure",
    "ESG reporting sustainability report",
]

# Case-insensitive; any hit means the model found nothing for the query
NEGATIVE_RESULT_PHRASES = [
    "no relevant information found",
    "no information found",
    "could not find",
    "not available in my knowledge",
]

DEFAULT_RELEVANCE_SCORE = 0.8
SOURCE_LABEL = "Knowledge Search"

Sleep = Callable[[float], Awaitable[None]]


def parse_research_response(full_query: str, content: str) -> List[SearchResult]:
    """Whole reply becomes one result, unless it says nothing was found."""
    lowered = (content or "").lower()
    if not lowered.strip() or any(phrase in lowered for phrase in NEGATIVE_RESULT_PHRASES):
        return []
    return [
        SearchResult(
            title=f"Search Results: {full_query}",
            source_label=SOURCE_LABEL,
            snippet=content,
            relevance_score=DEFAULT_RELEVANCE_SCORE,
        )
    ]


class EvidenceGatherer:
    """Runs topic queries for one company against the research provider."""

    def __init__(
        self,
        gateway: LLMGateway,
        cfg: Optional[Settings] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.gateway = gateway
        self.settings = cfg or default_settings
        self._sleep = sleep

    async def gather(self, company_name: str, topics: Iterable[str]) -> EvidenceBundle:
        """Run every topic in order. Never raises for a single failed query."""
        topics = list(topics)
        bundle = EvidenceBundle()
        logger.info(
            f"Starting evidence search for {company_name}",
            extra={"company_name": company_name, "query_count": len(topics)}
        )

        for index, topic in enumerate(topics):
            full_query = f"{company_name} {topic}"
            try:
                results = await self._search(full_query)
                EVIDENCE_QUERIES_TOTAL.labels(outcome="found" if results else "empty").inc()
            except Exception as e:
                bundle.failures.append(self._record_failure(company_name, topic, full_query, e))
                results = []

            bundle.entries[topic] = SearchResults(query=full_query, results=results)

            if index < len(topics) - 1 and self.settings.research_delay_seconds > 0:
                await self._sleep(self.settings.research_delay_seconds)

        logger.info(
            f"Evidence search completed. Total results: {bundle.total_results()} across {len(bundle.entries)} queries",
            extra={"company_name": company_name, "failed_queries": len(bundle.failures)}
        )
        return bundle

    def _record_failure(self, company_name: str, topic: str, full_query: str, error: Exception) -> EvidenceFailure:
        failure = EvidenceQueryFailure(
            f"Search query failed: {topic}",
            company_name=company_name,
            query=full_query,
            error_type=type(error).__name__,
            error=str(error),
        )
        logger.warning(str(failure), extra=failure.context)
        EVIDENCE_QUERIES_TOTAL.labels(outcome="failed").inc()
        return EvidenceFailure(topic=topic, query=full_query, error_type=type(error).__name__, message=str(error))

    async def _search(self, full_query: str) -> List[SearchResult]:
        response = await self.gateway.call(
            build_research_prompt(full_query),
            RESEARCH_SYSTEM_PROMPT,
            self.settings.research_provider,
            max_tokens=self.settings.research_max_tokens,
            temperature=self.settings.research_temperature,
        )
        results = parse_research_response(full_query, response.content)
        if not results:
            logger.info(f"No results found for: \"{full_query}\"")
        return results

    async def gather_track_record(self, company_name: str) -> EvidenceBundle:
        return await self.gather(company_name, TRACK_RECORD_TOPICS)

    async def gather_practices(self, company_name: str) -> EvidenceBundle:
        return await self.gather(company_name, PRACTICE_TOPICS)

    async def gather_all(self, company_name: str) -> EvidenceBundle:
        """Both batches concurrently, merged track-record first.

        A batch that fails as a whole contributes an empty result for each of
        its topics instead of failing the merge.
        """
        track_record, practices = await asyncio.gather(
            self.gather_track_record(company_name),
            self.gather_practices(company_name),
            return_exceptions=True,
        )
        if isinstance(track_record, BaseException):
            track_record = self._degraded_batch(company_name, TRACK_RECORD_TOPICS, track_record)
        if isinstance(practices, BaseException):
            practices = self._degraded_batch(company_name, PRACTICE_TOPICS, practices)
        return track_record.merge(practices)

    def _degraded_batch(self, company_name: str, topics: Iterable[str], error: BaseException) -> EvidenceBundle:
        # CancelledError and friends still propagate
        if not isinstance(error, Exception):
            raise error
        logger.error(
            f"Evidence batch failed for {company_name}: {error}",
            extra={"company_name": company_name, "error_type": type(error).__name__},
            exc_info=error,
        )
        bundle = EvidenceBundle()
        for topic in topics:
            full_query = f"{company_name} {topic}"
            bundle.entries[topic] = SearchResults(query=full_query)
            bundle.failures.append(
                EvidenceFailure(topic=topic, query=full_query, error_type=type(error).__name__, message=str(error))
            )
        return bundle


def format_evidence_for_prompt(evidence: Union[EvidenceBundle, List[SearchResults]]) -> str:
    """Render evidence as prompt text, grouped by query."""
    records = evidence.records() if isinstance(evidence, EvidenceBundle) else list(evidence)

    lines = ["", "", "=== KNOWLEDGE SEARCH RESULTS (External Verification) ==="]
    if not any(record.results for record in records):
        lines.append("No additional information found through knowledge search.")
        return "\n".join(lines) + "\n"

    for record in records:
        if not record.results:
            continue
        lines.append("")
        lines.append(f"Query: \"{record.query}\"")
        for idx, result in enumerate(record.results, start=1):
            lines.append(f"Result {idx}:")
            lines.append(f"  {result.snippet}")
            if result.source_label and result.source_label != SOURCE_LABEL:
                lines.append(f"  Source: {result.source_label}")
            lines.append("")

    lines.append("=== END KNOWLEDGE SEARCH RESULTS ===")
    return "\n".join(lines) + "\n"
