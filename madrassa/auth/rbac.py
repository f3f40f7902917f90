"""
Role-Based Access Control (RBAC): Permission Matrix and Resolver
=============================================================================
CONCEPT: Grants, not flags

A role's permissions are an unordered set of GRANTS. A grant is a
(resource, action) pair:

    secretariat -> {(students, manage), (classes, read), ...}
    guardian    -> {(students, read), (payments, read), ...}

There are no "deny" entries. The matrix is a closed world: anything not
explicitly granted is denied. That gives us two useful properties:
  - A new resource is locked down for every role except admin until
    someone grants it on purpose.
  - A typo in a role or resource name can never open access. It simply
    matches nothing.

CONCEPT: `manage` as a wildcard

Holding `manage` on a resource implies create, read, update and delete on
that resource. The four CRUD actions never imply one another: a role with
`read` on payments cannot update payments.

So a permission check is a two-candidate membership test:

    allowed = (resource, action) in grants or (resource, manage) in grants

PermissionMatrix precomputes a frozenset of (resource, action) keys per
role, so every check is O(1) regardless of how many grants a role has.

THE MATRIX:

  | Role        | Grants                                                    |
  |-------------|-----------------------------------------------------------|
  | admin       | manage on every resource                                  |
  | secretariat | manage: students, guardians, enrollments, re_enrollments, |
  |             |   payments                                                |
  |             | read: classes, programs, attendance, reports, dashboard,  |
  |             |   notifications                                           |
  | teacher     | read: students, classes, guardians                        |
  |             | manage: attendance, grades, reports                       |
  |             | read: dashboard, notifications                            |
  | guardian    | read: students, payments, attendance, grades, dashboard,  |
  |             |   notifications                                           |
  | student     | read: attendance, grades, dashboard, notifications        |

OWN RECORDS ONLY: WHAT THIS MODULE DOES NOT DO

Several grants only make sense for the caller's own rows: a guardian reads
THEIR children, a teacher manages grades for THEIR classes. The matrix
records this as `Grant.own_records_only`, but the resolver ignores it.
`has_permission("guardian", "students", "read")` is True for the role as a
whole; it says nothing about which students.

Row scoping belongs to the data-access layer. Before running a query on
behalf of a role, ask `requires_ownership_scope(role, resource)`; if it is
True, the query MUST be filtered to the caller's own records.
=============================================================================
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from madrassa.auth.resources import (
    ADMINISTRATIVE_ROLES,
    CRUD_ACTIONS,
    Action,
    Resource,
    Role,
    parse_action,
    parse_resource,
    parse_role,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Grant:
    """
    One (resource, action) pair held by a role.

    `own_records_only` is informational: it marks grants the data layer must
    scope to the caller's own rows. It plays no part in equality-based
    resolution or in set membership: a grant is equal to its bare
    (resource, action) pair (see `requires_ownership_scope`).
    """

    resource: Resource
    action: Action
    own_records_only: bool = field(default=False, compare=False)


def _grant(resource: Resource, action: Action, *, own: bool = False) -> Grant:
    return Grant(resource=resource, action=action, own_records_only=own)


# =============================================================================
# Grant Table
# =============================================================================
# The authoritative, declarative list of grants per role. This literal is
# the single source of truth; it is validated and indexed once by
# PermissionMatrix below and never mutated afterwards.
#
# To change what a role can do:
#   1. Edit its list here
#   2. Run the test suite (tests/test_rbac.py pins every cell of the matrix)
# =============================================================================

ROLE_GRANTS: dict[Role, tuple[Grant, ...]] = {
    # -----------------------------------------------------------------
    # ADMIN: full access to everything, including resources added later
    # -----------------------------------------------------------------
    Role.ADMIN: tuple(_grant(resource, Action.MANAGE) for resource in Resource),

    # -----------------------------------------------------------------
    # SECRETARIAT: administrative office, runs admissions and payments
    # -----------------------------------------------------------------
    Role.SECRETARIAT: (
        _grant(Resource.STUDENTS, Action.MANAGE),
        _grant(Resource.GUARDIANS, Action.MANAGE),
        _grant(Resource.CLASSES, Action.READ),
        _grant(Resource.PROGRAMS, Action.READ),
        _grant(Resource.ENROLLMENTS, Action.MANAGE),
        _grant(Resource.RE_ENROLLMENTS, Action.MANAGE),
        _grant(Resource.PAYMENTS, Action.MANAGE),
        _grant(Resource.ATTENDANCE, Action.READ),
        _grant(Resource.REPORTS, Action.READ),
        _grant(Resource.DASHBOARD, Action.READ),
        _grant(Resource.NOTIFICATIONS, Action.READ),
    ),

    # -----------------------------------------------------------------
    # TEACHER: educational access, scoped to own classes and students
    # -----------------------------------------------------------------
    Role.TEACHER: (
        _grant(Resource.STUDENTS, Action.READ, own=True),
        _grant(Resource.CLASSES, Action.READ, own=True),
        _grant(Resource.GUARDIANS, Action.READ, own=True),
        _grant(Resource.ATTENDANCE, Action.MANAGE, own=True),
        _grant(Resource.GRADES, Action.MANAGE, own=True),
        _grant(Resource.REPORTS, Action.MANAGE, own=True),
        _grant(Resource.DASHBOARD, Action.READ),
        _grant(Resource.NOTIFICATIONS, Action.READ),
    ),

    # -----------------------------------------------------------------
    # GUARDIAN: read-only view of their own children and payments
    # -----------------------------------------------------------------
    Role.GUARDIAN: (
        _grant(Resource.STUDENTS, Action.READ, own=True),
        _grant(Resource.PAYMENTS, Action.READ, own=True),
        _grant(Resource.ATTENDANCE, Action.READ, own=True),
        _grant(Resource.GRADES, Action.READ, own=True),
        _grant(Resource.DASHBOARD, Action.READ),
        _grant(Resource.NOTIFICATIONS, Action.READ),
    ),

    # -----------------------------------------------------------------
    # STUDENT: own attendance and grades
    # -----------------------------------------------------------------
    Role.STUDENT: (
        _grant(Resource.ATTENDANCE, Action.READ, own=True),
        _grant(Resource.GRADES, Action.READ, own=True),
        _grant(Resource.DASHBOARD, Action.READ),
        _grant(Resource.NOTIFICATIONS, Action.READ),
    ),
}


class PermissionMatrix:
    """
    Immutable, validated view over a grant table.

    Construction does all the work:
      1. Validates that every role is a Role and every grant names a
         registered Resource and Action (raises ValueError otherwise).
         This is the startup consistency check; it never runs per request.
      2. Builds a frozenset of (resource, action) keys per role for O(1)
         lookups.
      3. Records which resources each role holds only for its own records.

    After __init__ nothing is writable: the mappings are read-only proxies
    and attribute assignment raises. Concurrent readers need no locking.

    USAGE:
        matrix = PermissionMatrix(ROLE_GRANTS)
        matrix.allows("teacher", "grades", "update")    -> True
        matrix.allows("teacher", "payments", "read")    -> False

        # Tests can build an alternate matrix and inject it:
        tiny = PermissionMatrix({Role.STUDENT: [Grant(Resource.GRADES, Action.READ)]})
        has_permission("student", "grades", "read", matrix=tiny)
    """

    __slots__ = ("_grants", "_index", "_owned")

    def __init__(self, table: Mapping[Role, Iterable[Grant]]):
        grants: dict[Role, frozenset[Grant]] = {}
        index: dict[Role, frozenset[tuple[Resource, Action]]] = {}
        owned: dict[Role, frozenset[Resource]] = {}

        for raw_role, raw_grants in table.items():
            role = parse_role(raw_role)
            if role is None:
                raise ValueError(f"Unknown role in permission table: {raw_role!r}")

            normalized = frozenset(self._normalize(role, g) for g in raw_grants)
            grants[role] = normalized
            index[role] = frozenset((g.resource, g.action) for g in normalized)
            owned[role] = frozenset(g.resource for g in normalized if g.own_records_only)

        object.__setattr__(self, "_grants", MappingProxyType(grants))
        object.__setattr__(self, "_index", MappingProxyType(index))
        object.__setattr__(self, "_owned", MappingProxyType(owned))

        logger.debug(
            f"Permission matrix built: {len(grants)} roles, "
            f"{sum(len(g) for g in grants.values())} grants"
        )

    def __setattr__(self, name, value):
        raise AttributeError(f"PermissionMatrix is read-only; cannot set {name!r}")

    def __delattr__(self, name):
        raise AttributeError(f"PermissionMatrix is read-only; cannot delete {name!r}")

    @staticmethod
    def _normalize(role: Role, grant: Grant) -> Grant:
        if not isinstance(grant, Grant):
            raise ValueError(
                f"Grant for role '{role.value}' is not a Grant: {grant!r}"
            )
        resource = parse_resource(grant.resource)
        if resource is None:
            raise ValueError(
                f"Grant for role '{role.value}' names unknown resource {grant.resource!r}"
            )
        action = parse_action(grant.action)
        if action is None:
            raise ValueError(
                f"Grant for role '{role.value}' names unknown action {grant.action!r}"
            )
        return Grant(resource, action, bool(grant.own_records_only))

    def roles(self) -> tuple[Role, ...]:
        return tuple(self._grants)

    def grants_for(self, role: Role | str | None) -> frozenset[Grant]:
        """Every grant held by `role`. Unknown roles hold nothing."""
        parsed = parse_role(role)
        if parsed is None:
            return frozenset()
        return self._grants.get(parsed, frozenset())

    def allows(
        self,
        role: Role | str | None,
        resource: Resource | str | None,
        action: Action | str | None,
    ) -> bool:
        parsed_role = parse_role(role)
        parsed_resource = parse_resource(resource)
        parsed_action = parse_action(action)
        if parsed_role is None or parsed_resource is None or parsed_action is None:
            return False

        keys = self._index.get(parsed_role)
        if not keys:
            return False
        return (
            (parsed_resource, parsed_action) in keys
            or (parsed_resource, Action.MANAGE) in keys
        )

    def is_owner_scoped(self, role: Role | str | None, resource: Resource | str | None) -> bool:
        parsed_role = parse_role(role)
        parsed_resource = parse_resource(resource)
        if parsed_role is None or parsed_resource is None:
            return False
        return parsed_resource in self._owned.get(parsed_role, frozenset())


# Process-wide matrix. Built at import time, so a broken ROLE_GRANTS literal
# fails the first import rather than the first request.
DEFAULT_MATRIX = PermissionMatrix(ROLE_GRANTS)


# =============================================================================
# Resolver
# =============================================================================
# Pure functions over a matrix. Each takes an optional `matrix` so callers
# and tests can substitute one; by default they read DEFAULT_MATRIX.
#
# None of these raise. Unknown roles, resources and actions are denials.
# =============================================================================

def has_permission(
    role: Role | str | None,
    resource: Resource | str | None,
    action: Action | str | None,
    matrix: PermissionMatrix = DEFAULT_MATRIX,
) -> bool:
    """
    Check whether `role` may perform `action` on `resource`.

    True iff the role holds (resource, action) or (resource, manage).

    EXAMPLE LOOKUPS:
        has_permission("teacher", "grades", "update")     -> True  (manage)
        has_permission("teacher", "payments", "read")     -> False
        has_permission("guardian", "students", "delete")  -> False (read only)
        has_permission("janitor", "students", "read")     -> False (unknown role)
        has_permission("admin", "studnets", "read")       -> False (typo)

    USAGE:
        # In a route handler, prefer the require_permission() dependency.
        # For ad-hoc checks:
        if not has_permission(user.role, Resource.PAYMENTS, Action.UPDATE):
            raise HTTPException(status_code=403, detail="Not authorized")
    """
    return matrix.allows(role, resource, action)


def can_create(role, resource, matrix: PermissionMatrix = DEFAULT_MATRIX) -> bool:
    return has_permission(role, resource, Action.CREATE, matrix) or has_permission(
        role, resource, Action.MANAGE, matrix
    )


def can_read(role, resource, matrix: PermissionMatrix = DEFAULT_MATRIX) -> bool:
    return has_permission(role, resource, Action.READ, matrix) or has_permission(
        role, resource, Action.MANAGE, matrix
    )


def can_update(role, resource, matrix: PermissionMatrix = DEFAULT_MATRIX) -> bool:
    return has_permission(role, resource, Action.UPDATE, matrix) or has_permission(
        role, resource, Action.MANAGE, matrix
    )


def can_delete(role, resource, matrix: PermissionMatrix = DEFAULT_MATRIX) -> bool:
    return has_permission(role, resource, Action.DELETE, matrix) or has_permission(
        role, resource, Action.MANAGE, matrix
    )


def can_manage(role, resource, matrix: PermissionMatrix = DEFAULT_MATRIX) -> bool:
    return has_permission(role, resource, Action.MANAGE, matrix)


def is_admin(role: Role | str | None) -> bool:
    return parse_role(role) is Role.ADMIN


def has_administrative_access(role: Role | str | None) -> bool:
    """Admin and secretariat run the school office; everyone else does not."""
    return parse_role(role) in ADMINISTRATIVE_ROLES


def can_access_management(role: Role | str | None) -> bool:
    # Management screens (accounts, academic years, settings) follow the
    # administrative split.
    return has_administrative_access(role)


def requires_ownership_scope(
    role: Role | str | None,
    resource: Resource | str | None,
    matrix: PermissionMatrix = DEFAULT_MATRIX,
) -> bool:
    """
    Whether queries on `resource` for `role` must be limited to own records.

    This does NOT grant or deny anything. It tells the data-access layer
    that the role's grant on this resource is for its own rows only, e.g.
    a guardian reading students must only see their own children.
    """
    return matrix.is_owner_scoped(role, resource)


def get_allowed_actions(
    role: Role | str | None,
    resource: Resource | str | None,
    matrix: PermissionMatrix = DEFAULT_MATRIX,
) -> list[Action]:
    """
    Actions `role` may perform on `resource`, with `manage` expanded.

    USAGE:
        get_allowed_actions("secretariat", "payments")
        # -> [CREATE, READ, UPDATE, DELETE, MANAGE]
        get_allowed_actions("guardian", "payments")
        # -> [READ]
    """
    return [
        action
        for action in (*CRUD_ACTIONS, Action.MANAGE)
        if has_permission(role, resource, action, matrix)
    ]


def get_role_permissions(
    role: Role | str | None,
    matrix: PermissionMatrix = DEFAULT_MATRIX,
) -> dict[str, list[str]]:
    """
    JSON-friendly permission summary for ONE role.

    Resources the role cannot touch are left out. This is what the
    /permissions/me endpoint returns; it never includes other roles.

    USAGE:
        get_role_permissions("student")
        # {
        #     "attendance": ["read"],
        #     "grades": ["read"],
        #     "dashboard": ["read"],
        #     "notifications": ["read"],
        # }
    """
    summary: dict[str, list[str]] = {}
    for resource in Resource:
        actions = get_allowed_actions(role, resource, matrix)
        if actions:
            summary[resource.value] = [action.value for action in actions]
    return summary
