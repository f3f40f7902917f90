"""
Health Check Endpoints
=============================================================================
CONCEPT: Liveness vs. Readiness

  /health (Liveness): "Is the process running?"
  /ready (Readiness): "Can it answer permission questions?"

This service has no database or cache, so readiness only confirms that the
permission matrix loaded and covers every role.
=============================================================================
"""

from fastapi import APIRouter

from madrassa.auth.rbac import DEFAULT_MATRIX
from madrassa.auth.resources import Role

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Liveness probe. Always returns 200 if the process is alive."""
    return {"status": "ok", "service": "madrassa-access"}


@router.get("/ready")
async def readiness_check():
    loaded = set(DEFAULT_MATRIX.roles())
    missing = sorted(role.value for role in Role if role not in loaded)
    return {
        "status": "ok" if not missing else "degraded",
        "checks": {"permission_matrix": "ok" if not missing else f"missing roles: {missing}"},
    }
