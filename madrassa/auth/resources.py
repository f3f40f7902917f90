"""
Resource Registry: Roles, Resources and Actions
=============================================================================
CONCEPT: Closed Vocabularies

Every permission question in the school system has the same shape:

    "Can a <role> perform <action> on <resource>?"

All three parts come from small, fixed vocabularies. We model each one as
an Enum so that a typo like "studnets" is caught by tests and editors
instead of silently matching nothing at runtime.

The enums inherit from `str`, so `Resource.STUDENTS == "students"` holds
and members serialize to JSON as plain strings. Route handlers and the
session layer can keep passing strings around; the coercion helpers at the
bottom of this module turn them into members (or None) at the boundary.

ADDING A RESOURCE:
  1. Add a member to `Resource`
  2. Grant it to the relevant roles in rbac.ROLE_GRANTS
  3. Admin picks it up automatically (admin manages every resource)
=============================================================================
"""

from enum import Enum


class Role(str, Enum):
    """The five account roles. Assigned at account creation, never derived."""

    ADMIN = "admin"
    SECRETARIAT = "secretariat"
    TEACHER = "teacher"
    GUARDIAN = "guardian"
    STUDENT = "student"


class Resource(str, Enum):
    """Protected domain object classes."""

    STUDENTS = "students"
    TEACHERS = "teachers"
    GUARDIANS = "guardians"
    CLASSES = "classes"
    PROGRAMS = "programs"
    ACADEMIC_YEARS = "academic_years"
    ENROLLMENTS = "enrollments"
    RE_ENROLLMENTS = "re_enrollments"
    ACCOUNTS = "accounts"
    PAYMENTS = "payments"
    ATTENDANCE = "attendance"
    GRADES = "grades"
    REPORTS = "reports"
    SETTINGS = "settings"
    DASHBOARD = "dashboard"
    NOTIFICATIONS = "notifications"


class Action(str, Enum):
    """
    What a role can do to a resource.

    MANAGE is a wildcard: holding it on a resource implies every other
    action on that resource. The four CRUD actions do not imply each other
    (holding UPDATE does not grant READ).
    """

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


CRUD_ACTIONS: tuple[Action, ...] = (
    Action.CREATE,
    Action.READ,
    Action.UPDATE,
    Action.DELETE,
)

ADMINISTRATIVE_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.SECRETARIAT})


# =============================================================================
# Coercion helpers
# =============================================================================
# Callers hold roles and resources as strings (JWT claims, query params,
# route constants). These helpers return the matching member or None.
# They never raise: an unrecognized value is simply "nothing", which the
# resolver turns into a denial.
# =============================================================================

def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def parse_role(value: Role | str | None) -> Role | None:
    return _coerce(Role, value)


def parse_resource(value: Resource | str | None) -> Resource | None:
    return _coerce(Resource, value)


def parse_action(value: Action | str | None) -> Action | None:
    return _coerce(Action, value)
