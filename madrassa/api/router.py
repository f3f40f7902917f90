"""
API Router Aggregator
=============================================================================
Aggregates all sub-routers into one, which is then mounted on the main
FastAPI app:
  - health.py      -> /health, /ready
  - permissions.py -> /permissions/*
  - metrics.py     -> /metrics
=============================================================================
"""

from fastapi import APIRouter

from madrassa.api.health import router as health_router
from madrassa.api.metrics import router as metrics_router
from madrassa.api.permissions import router as permissions_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(permissions_router)
api_router.include_router(metrics_router)
