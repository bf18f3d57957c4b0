"""API routers for the flight tracker."""

from fastapi import APIRouter

from .health import router as health_router
from .snapshots import router as snapshots_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(snapshots_router)

__all__ = ["api_router"]
