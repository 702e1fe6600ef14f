"""Prometheus metrics for LLM usage and assessment observability.

Metrics taxonomy:
LLM gateway:
    - llm_requests_total (provider, model, outcome)
    - llm_token_usage_total (provider, model, token_type)
    - llm_cost_usd_total (provider, model)
    - llm_request_latency_seconds (provider)
Evidence gathering:
    - evidence_queries_total (outcome: found / empty / failed)
Assessments:
    - assessments_total (kind: ddq / im / profile, outcome)
    - assessment_latency_seconds (kind)
"""
from prometheus_client import Counter, Histogram

LLM_REQUESTS_TOTAL = Counter(
    "llm_requests_total",
    "Total LLM API calls",
    ["provider", "model", "outcome"],
)

LLM_TOKEN_USAGE = Counter(
    "llm_token_usage_total",
    "Tokens consumed by LLM calls",
    ["provider", "model", "token_type"],
)

LLM_COST_USD = Counter(
    "llm_cost_usd_total",
    "Estimated LLM spend in USD",
    ["provider", "model"],
)

LLM_LATENCY_SECONDS = Histogram(
    "llm_request_latency_seconds",
    "Latency of LLM API calls in seconds",
    ["provider"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, 300),
)

EVIDENCE_QUERIES_TOTAL = Counter(
    "evidence_queries_total",
    "Knowledge-search queries by outcome",
    ["outcome"],
)

ASSESSMENTS_TOTAL = Counter(
    "assessments_total",
    "Assessment generations by kind and outcome",
    ["kind", "outcome"],
)

ASSESSMENT_LATENCY_SECONDS = Histogram(
    "assessment_latency_seconds",
    "End-to-end assessment generation latency in seconds",
    ["kind"],
    buckets=(1, 5, 10, 30, 60, 120, 300, 600),
)

__all__ = [
    "LLM_REQUESTS_TOTAL",
    "LLM_TOKEN_USAGE",
    "LLM_COST_USD",
    "LLM_LATENCY_SECONDS",
    "EVIDENCE_QUERIES_TOTAL",
    "ASSESSMENTS_TOTAL",
    "ASSESSMENT_LATENCY_SECONDS",
]
