"""
Capability Facade: permission checks bound to the signed-in role
=============================================================================
CONCEPT: Why a facade?

The resolver in rbac.py answers questions for ANY role:

    can_update("secretariat", "payments")

UI and route code almost always asks about ONE role, the one in the
current session. Passing it to every call is noisy and easy to get wrong,
so Capabilities binds the role once and exposes role-free checks:

    caps = Capabilities("secretariat")
    caps.can_update("payments")        -> True
    caps.payments.can_delete           -> True
    caps.classes.can_manage            -> False

CONCEPT: Fail closed when nobody is signed in

With no bound role (None, or a value that is not a known role) every
check returns False. Nothing raises. A logged-out page renders with every
gated control hidden.

CONCEPT: One snapshot per role

The per-resource capability map is generated from the Resource Registry
whenever the role changes (login, logout, account switch). The new map is
computed in full and then swapped in with a single attribute assignment,
so a reader sees either the old role's answers or the new role's answers,
never a mix. Nothing is cached across roles.

The facade adds no policy of its own. Every answer comes from the
resolver.
=============================================================================
"""

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Mapping

from madrassa.auth import rbac
from madrassa.auth.rbac import DEFAULT_MATRIX, PermissionMatrix
from madrassa.auth.resources import Action, Resource, Role, parse_resource, parse_role


@dataclass(frozen=True)
class ResourceCapabilities:
    """What the bound role can do to one resource."""

    can_create: bool = False
    can_read: bool = False
    can_update: bool = False
    can_delete: bool = False
    can_manage: bool = False

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


NO_CAPABILITIES = ResourceCapabilities()


@dataclass(frozen=True)
class _Snapshot:
    role: Role | None
    resources: Mapping[Resource, ResourceCapabilities]


class Capabilities:
    """
    Read-only permission queries for the currently bound role.

    PARAMETERS:
      role: The authenticated user's role, or None when signed out.
      matrix: Permission matrix to resolve against. Defaults to the
          process-wide DEFAULT_MATRIX; tests pass their own.

    USAGE:
        caps = Capabilities(current_user.role)
        if caps.students.can_create:
            render_add_student_button()

        # On logout:
        caps.clear()
        caps.can_read("students")  -> False
    """

    def __init__(
        self,
        role: Role | str | None = None,
        matrix: PermissionMatrix = DEFAULT_MATRIX,
    ):
        self._matrix = matrix
        self._snapshot = self._build(role)

    # -----------------------------------------------------------------
    # Binding
    # -----------------------------------------------------------------

    def bind(self, role: Role | str | None) -> None:
        """Replace the bound role and recompute every capability."""
        self._snapshot = self._build(role)

    def clear(self) -> None:
        self.bind(None)

    def _build(self, role: Role | str | None) -> _Snapshot:
        parsed = parse_role(role)
        if parsed is None:
            resources = {resource: NO_CAPABILITIES for resource in Resource}
        else:
            resources = {
                resource: ResourceCapabilities(
                    can_create=rbac.can_create(parsed, resource, self._matrix),
                    can_read=rbac.can_read(parsed, resource, self._matrix),
                    can_update=rbac.can_update(parsed, resource, self._matrix),
                    can_delete=rbac.can_delete(parsed, resource, self._matrix),
                    can_manage=rbac.can_manage(parsed, resource, self._matrix),
                )
                for resource in Resource
            }
        return _Snapshot(role=parsed, resources=MappingProxyType(resources))

    @property
    def role(self) -> Role | None:
        return self._snapshot.role

    @property
    def is_authenticated(self) -> bool:
        return self._snapshot.role is not None

    # -----------------------------------------------------------------
    # Checks
    # -----------------------------------------------------------------

    def for_resource(self, resource: Resource | str | None) -> ResourceCapabilities:
        parsed = parse_resource(resource)
        if parsed is None:
            return NO_CAPABILITIES
        return self._snapshot.resources.get(parsed, NO_CAPABILITIES)

    def has_permission(
        self,
        resource: Resource | str | None,
        action: Action | str | None,
    ) -> bool:
        role = self._snapshot.role
        if role is None:
            return False
        return rbac.has_permission(role, resource, action, self._matrix)

    def can_create(self, resource: Resource | str | None) -> bool:
        return self.for_resource(resource).can_create

    def can_read(self, resource: Resource | str | None) -> bool:
        return self.for_resource(resource).can_read

    def can_update(self, resource: Resource | str | None) -> bool:
        return self.for_resource(resource).can_update

    def can_delete(self, resource: Resource | str | None) -> bool:
        return self.for_resource(resource).can_delete

    def can_manage(self, resource: Resource | str | None) -> bool:
        return self.for_resource(resource).can_manage

    def is_admin(self) -> bool:
        return rbac.is_admin(self._snapshot.role)

    def has_administrative_access(self) -> bool:
        return rbac.has_administrative_access(self._snapshot.role)

    def can_access_management(self) -> bool:
        return rbac.can_access_management(self._snapshot.role)

    def as_dict(self) -> dict[str, dict[str, bool]]:
        snapshot = self._snapshot
        return {
            resource.value: capabilities.as_dict()
            for resource, capabilities in snapshot.resources.items()
        }

    # Per-resource attribute access (caps.students, caps.academic_years, ...)
    # is generated from the registry, so a new Resource member needs no
    # extra code here.
    def __getattr__(self, name: str) -> ResourceCapabilities:
        if name.startswith("_"):
            raise AttributeError(name)
        resource = parse_resource(name)
        if resource is None:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            )
        return self.for_resource(resource)

    def __repr__(self) -> str:
        role = self._snapshot.role
        return f"Capabilities(role={role.value if role else None!r})"
