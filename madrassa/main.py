"""
FastAPI Application Entry Point
=============================================================================
A small HTTP surface over the RBAC core. Page routes and data APIs of the
school application live elsewhere; they import madrassa.auth directly and
guard themselves with require_permission().

Startup verifies the permission matrix against the resource registry, so a
broken grant table stops the process before it serves a single request.

Run with: uvicorn madrassa.main:app --reload --host 0.0.0.0 --port 8000
=============================================================================
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from madrassa.api.router import api_router
from madrassa.auth.rbac import DEFAULT_MATRIX, ROLE_GRANTS, PermissionMatrix
from madrassa.auth.resources import Role
from madrassa.config import settings
from madrassa.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


def verify_permission_matrix(matrix: PermissionMatrix = DEFAULT_MATRIX) -> None:
    """
    Startup consistency check.

    PermissionMatrix already rejects unknown resources and actions when it
    is built. Here we additionally require an entry for every Role, so a
    role added to the enum without grants is noticed at boot.
    """
    missing = [role.value for role in Role if role not in matrix.roles()]
    if missing:
        raise RuntimeError(f"Permission matrix has no entry for roles: {missing}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === STARTUP ===
    setup_logging()
    verify_permission_matrix()
    logger.info(
        "startup",
        app=settings.app_name,
        env=settings.app_env,
        roles=len(ROLE_GRANTS),
    )

    yield

    # === SHUTDOWN ===
    logger.info("shutdown", app=settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description=(
        "Role-based access control for the MyMadrassa school system: "
        "capability lookups for the signed-in role and route guards."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
