"""
Permission API Endpoints
=============================================================================
CONCEPT: Let the client ask, do not ship the matrix

The web client needs to know what to render: which sidebar entries, which
"Add" / "Edit" / "Delete" buttons. It asks about ITS OWN role only:

  GET /permissions/me              -> capability map for the caller's role
  GET /permissions/me/navigation   -> sidebar entries the caller may open
  GET /permissions/check           -> one yes/no question

The full role-by-role matrix is never returned to ordinary users. Only a
caller who can read settings (admin) may preview another role through
GET /permissions/roles/{role}.

Hiding a button is a convenience, not security. Every route that changes
data must still guard itself with require_permission().
=============================================================================
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from madrassa.auth.capabilities import Capabilities
from madrassa.auth.dependencies import Principal, get_capabilities, require_permission
from madrassa.auth.navigation import visible_navigation
from madrassa.auth.rbac import get_role_permissions
from madrassa.auth.resources import Action, Resource, parse_role

router = APIRouter(prefix="/permissions", tags=["Permissions"])


# =============================================================================
# Pydantic Schemas
# =============================================================================
class CapabilitiesResponse(BaseModel):
    role: str
    is_admin: bool
    has_administrative_access: bool
    can_access_management: bool
    resources: dict[str, dict[str, bool]]


class NavItemResponse(BaseModel):
    label: str
    path: str
    resource: str


class PermissionCheckResponse(BaseModel):
    resource: str
    action: str
    allowed: bool


class RolePermissionsResponse(BaseModel):
    role: str
    permissions: dict[str, list[str]]


# =============================================================================
# Endpoints
# =============================================================================
@router.get("/me", response_model=CapabilitiesResponse)
async def my_capabilities(caps: Capabilities = Depends(get_capabilities)):
    """Everything the caller's role may do, per resource."""
    return CapabilitiesResponse(
        role=caps.role.value,
        is_admin=caps.is_admin(),
        has_administrative_access=caps.has_administrative_access(),
        can_access_management=caps.can_access_management(),
        resources=caps.as_dict(),
    )


@router.get("/me/navigation", response_model=list[NavItemResponse])
async def my_navigation(caps: Capabilities = Depends(get_capabilities)):
    return [
        NavItemResponse(label=item.label, path=item.path, resource=item.resource.value)
        for item in visible_navigation(caps)
    ]


@router.get("/check", response_model=PermissionCheckResponse)
async def check_permission(
    resource: str = Query(..., min_length=1, description="Resource name, e.g. 'payments'"),
    action: str = Query(..., min_length=1, description="create, read, update, delete or manage"),
    caps: Capabilities = Depends(get_capabilities),
):
    """
    Ask one question for the caller's role.

    Unknown resource or action names are answered with allowed=false, the
    same as any other denial.
    """
    return PermissionCheckResponse(
        resource=resource,
        action=action,
        allowed=caps.has_permission(resource, action),
    )


@router.get("/roles/{role}", response_model=RolePermissionsResponse)
async def role_permissions(
    role: str,
    _: Principal = Depends(require_permission(Resource.SETTINGS, Action.READ)),
):
    """Preview what another role can do. Settings readers only."""
    parsed = parse_role(role)
    if parsed is None:
        raise HTTPException(status_code=404, detail=f"Role {role} not found")
    return RolePermissionsResponse(role=parsed.value, permissions=get_role_permissions(parsed))
