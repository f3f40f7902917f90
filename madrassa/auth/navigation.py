"""
Sidebar navigation gated by read capability.

A navigation entry is shown only when the bound role can read the resource
behind it. Entries are declared once here so the sidebar, the mobile menu
and the /permissions/me/navigation endpoint agree on what a role sees.
"""

from dataclasses import dataclass
from typing import Iterable

from madrassa.auth.capabilities import Capabilities
from madrassa.auth.resources import Resource


@dataclass(frozen=True)
class NavItem:
    label: str
    path: str
    resource: Resource


NAVIGATION: tuple[NavItem, ...] = (
    NavItem("Dashboard", "/", Resource.DASHBOARD),
    NavItem("Students", "/students", Resource.STUDENTS),
    NavItem("Teachers", "/teachers", Resource.TEACHERS),
    NavItem("Guardians", "/guardians", Resource.GUARDIANS),
    NavItem("Courses", "/courses", Resource.CLASSES),
    NavItem("Programs", "/programs", Resource.PROGRAMS),
    NavItem("Academic Years", "/academic-years", Resource.ACADEMIC_YEARS),
    NavItem("Enrollments", "/enrollments", Resource.ENROLLMENTS),
    NavItem("Re-enrollments", "/re-enrollments", Resource.RE_ENROLLMENTS),
    NavItem("Attendance", "/attendance", Resource.ATTENDANCE),
    NavItem("Grading", "/grading", Resource.GRADES),
    NavItem("Payments", "/payments", Resource.PAYMENTS),
    NavItem("Reports", "/reports", Resource.REPORTS),
    NavItem("Notifications", "/notifications", Resource.NOTIFICATIONS),
    NavItem("Accounts", "/accounts", Resource.ACCOUNTS),
    NavItem("Settings", "/settings", Resource.SETTINGS),
)


def visible_navigation(
    capabilities: Capabilities,
    items: Iterable[NavItem] = NAVIGATION,
) -> list[NavItem]:
    """Items whose resource the bound role can read, in declaration order."""
    return [item for item in items if capabilities.can_read(item.resource)]
