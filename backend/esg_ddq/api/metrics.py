# esg_ddq/api/metrics.py
"""Prometheus scrape endpoint for the LLM, evidence and assessment counters in utils.metrics."""
from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", summary="Prometheus metrics scrape endpoint")
def scrape_metrics():
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
