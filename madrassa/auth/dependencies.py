"""
FastAPI Authorization Dependencies
=============================================================================
CONCEPT: Turning a boolean into an HTTP response

The RBAC core only ever answers True or False. Denial is a normal, frequent
outcome, so the core never raises. It is the route layer's job to turn
False into a 403, and this module is where that happens:

    @router.delete("/payments/{payment_id}")
    async def delete_payment(
        payment_id: int,
        principal: Principal = Depends(
            require_permission(Resource.PAYMENTS, Action.DELETE)
        ),
    ):
        ...

The dependency chain looks like:
    HTTP Request
      -> HTTPBearer (extracts token from Authorization header)
        -> get_current_principal (validates token, reads the role claim)
          -> require_permission (asks the resolver)
            -> Your route handler

STATUS CODES:
  401 Unauthorized: we do not know who you are (missing, invalid or
      expired token, or a role claim we do not recognize).
  403 Forbidden: we know who you are, and your role lacks the grant.

The 403 detail is always the same generic "Not authorized". It never
names the missing grant or the caller's role, so error payloads cannot be
used to map out the permission matrix.
=============================================================================
"""

from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from madrassa.auth.capabilities import Capabilities
from madrassa.auth.jwt import verify_token
from madrassa.auth.rbac import has_permission
from madrassa.auth.resources import Action, Resource, Role, parse_action, parse_resource, parse_role
from madrassa.observability.logging import get_logger
from madrassa.observability.metrics import record_authorization

logger = get_logger(__name__)

NOT_AUTHORIZED = "Not authorized"

# auto_error=False so a missing header produces our own 401 (with the
# WWW-Authenticate header) instead of FastAPI's default response.
bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Bearer token issued by the school session provider",
)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as far as authorization is concerned."""

    username: str
    role: Role


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    """
    Resolve the caller from the Bearer token.

    RAISES:
      HTTPException 401: no token, bad token, no subject, or a role claim
          that is not one of the five known roles. An unknown role is never
          mapped to some default role.
    """
    if credentials is None:
        raise _unauthenticated("Not authenticated")

    try:
        payload = verify_token(credentials.credentials)
    except ValueError as e:
        raise _unauthenticated(str(e)) from e

    role = parse_role(payload.get("role"))
    if role is None:
        raise _unauthenticated("Token carries no recognized role")

    return Principal(username=payload["sub"], role=role)


async def get_capabilities(
    principal: Principal = Depends(get_current_principal),
) -> Capabilities:
    """Capability facade bound to the caller's role, built per request."""
    return Capabilities(principal.role)


def require_permission(resource: Resource | str, action: Action | str) -> Callable:
    """
    Dependency factory: allow the request only if the caller's role holds
    `action` on `resource` (directly or through `manage`).

    The resource and action are checked when the route is DEFINED. A typo
    such as require_permission("studnets", "read") fails at import time
    instead of silently denying every request.

    RETURNS:
      A dependency returning the Principal, or raising 403.
    """
    parsed_resource = parse_resource(resource)
    parsed_action = parse_action(action)
    if parsed_resource is None:
        raise ValueError(f"Unknown resource: {resource!r}")
    if parsed_action is None:
        raise ValueError(f"Unknown action: {action!r}")

    async def permission_checker(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        allowed = has_permission(principal.role, parsed_resource, parsed_action)
        record_authorization(parsed_resource.value, allowed)
        if not allowed:
            logger.debug(
                "authorization_denied",
                role=principal.role.value,
                resource=parsed_resource.value,
                action=parsed_action.value,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=NOT_AUTHORIZED,
            )
        return principal

    return permission_checker


def require_role(*allowed_roles: Role | str) -> Callable:
    """
    Dependency factory for coarse role gates, e.g. management screens:

        Depends(require_role(Role.ADMIN, Role.SECRETARIAT))

    Prefer require_permission() when the route maps to a resource/action.
    """
    roles = frozenset(parse_role(r) for r in allowed_roles) - {None}
    if not roles:
        raise ValueError(f"No recognized roles in {allowed_roles!r}")

    async def role_checker(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        if principal.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=NOT_AUTHORIZED,
            )
        return principal

    return role_checker
