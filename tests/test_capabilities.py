"""Capability facade: binding, fail-closed behavior and navigation gating."""
import threading

import pytest

from madrassa.auth import rbac
from madrassa.auth.capabilities import NO_CAPABILITIES, Capabilities, ResourceCapabilities
from madrassa.auth.navigation import NAVIGATION, NavItem, visible_navigation
from madrassa.auth.rbac import Grant, PermissionMatrix
from madrassa.auth.resources import Action, Resource, Role


@pytest.mark.parametrize("role", [None, "janitor", ""])
def test_unbound_facade_denies_everything(role):
    caps = Capabilities(role)

    assert caps.is_authenticated is False
    assert caps.role is None
    for resource in Resource:
        assert caps.for_resource(resource) == NO_CAPABILITIES
        for action in Action:
            assert caps.has_permission(resource, action) is False
    assert caps.is_admin() is False
    assert caps.has_administrative_access() is False
    assert caps.can_access_management() is False


@pytest.mark.parametrize("role", list(Role))
def test_facade_is_a_pass_through_to_the_resolver(role):
    caps = Capabilities(role)

    for resource in Resource:
        assert caps.can_create(resource) is rbac.can_create(role, resource)
        assert caps.can_read(resource) is rbac.can_read(role, resource)
        assert caps.can_update(resource) is rbac.can_update(role, resource)
        assert caps.can_delete(resource) is rbac.can_delete(role, resource)
        assert caps.can_manage(resource) is rbac.can_manage(role, resource)
        for action in Action:
            assert caps.has_permission(resource, action) is rbac.has_permission(
                role, resource, action
            )
    assert caps.is_admin() is rbac.is_admin(role)
    assert caps.has_administrative_access() is rbac.has_administrative_access(role)


def test_per_resource_attributes_are_generated_from_the_registry():
    caps = Capabilities("secretariat")

    assert caps.students == ResourceCapabilities(True, True, True, True, True)
    assert caps.classes == ResourceCapabilities(can_read=True)
    assert caps.re_enrollments.can_create is True
    assert caps.academic_years == NO_CAPABILITIES


def test_unknown_attribute_raises_attribute_error():
    caps = Capabilities("admin")
    with pytest.raises(AttributeError):
        caps.homework


def test_unknown_resource_string_is_denied_not_raised():
    caps = Capabilities("admin")
    assert caps.can_read("studnets") is False
    assert caps.has_permission("studnets", "read") is False
    assert caps.for_resource(None) == NO_CAPABILITIES


def test_rebinding_recomputes_every_capability():
    caps = Capabilities("guardian")
    assert caps.payments.can_read is True
    assert caps.payments.can_update is False

    caps.bind("secretariat")
    assert caps.role is Role.SECRETARIAT
    assert caps.payments.can_update is True

    caps.bind(Role.STUDENT)
    assert caps.payments.can_read is False

    caps.clear()
    assert caps.is_authenticated is False
    assert caps.grades.can_read is False


def test_as_dict_covers_every_resource():
    snapshot = Capabilities("teacher").as_dict()

    assert set(snapshot) == {r.value for r in Resource}
    assert snapshot["grades"] == {
        "can_create": True,
        "can_read": True,
        "can_update": True,
        "can_delete": True,
        "can_manage": True,
    }
    assert snapshot["payments"]["can_read"] is False


def test_facade_uses_injected_matrix():
    matrix = PermissionMatrix({Role.STUDENT: [Grant(Resource.SETTINGS, Action.UPDATE)]})
    caps = Capabilities("student", matrix=matrix)

    assert caps.settings.can_update is True
    assert caps.settings.can_read is False
    assert caps.grades.can_read is False


def test_concurrent_rebinding_never_mixes_roles():
    # Admin manages everything; student manages nothing. Any snapshot that
    # is partly one and partly the other would show up as a mixed row.
    caps = Capabilities("admin")
    stop = threading.Event()
    mixed: list[dict] = []

    def flip():
        while not stop.is_set():
            caps.bind("student")
            caps.bind("admin")

    def observe():
        for _ in range(2000):
            manage_flags = {c["can_manage"] for c in caps.as_dict().values()}
            if len(manage_flags) > 1:
                mixed.append(manage_flags)

    writer = threading.Thread(target=flip)
    writer.start()
    try:
        observe()
    finally:
        stop.set()
        writer.join()

    assert mixed == []


# =============================================================================
# Navigation
# =============================================================================

def _labels(items: list[NavItem]) -> list[str]:
    return [item.label for item in items]


def test_student_navigation():
    assert _labels(visible_navigation(Capabilities("student"))) == [
        "Dashboard",
        "Attendance",
        "Grading",
        "Notifications",
    ]


def test_guardian_navigation():
    assert _labels(visible_navigation(Capabilities("guardian"))) == [
        "Dashboard",
        "Students",
        "Attendance",
        "Grading",
        "Payments",
        "Notifications",
    ]


def test_admin_sees_every_entry():
    assert visible_navigation(Capabilities("admin")) == list(NAVIGATION)


def test_signed_out_sees_nothing():
    assert visible_navigation(Capabilities(None)) == []


def test_every_navigation_entry_points_at_a_registered_resource():
    assert all(isinstance(item.resource, Resource) for item in NAVIGATION)
    assert len({item.path for item in NAVIGATION}) == len(NAVIGATION)
