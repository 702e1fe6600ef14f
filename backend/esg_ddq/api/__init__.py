from fastapi import APIRouter
from esg_ddq.api import assessments, downloads, health, metrics, profile, upload


api_router = APIRouter()

api_router.include_router(upload.router, tags=["documents"])
api_router.include_router(profile.router, tags=["profile"])
api_router.include_router(assessments.router, tags=["assessments"])
api_router.include_router(downloads.router, tags=["downloads"])
api_router.include_router(health.router, tags=["health"])
api_router.include_router(metrics.router)

__all__ = ["api_router"]
