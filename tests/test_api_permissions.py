"""
HTTP surface: /permissions/*, /health, /ready and /metrics.
"""
from datetime import timedelta

import pytest
from prometheus_client import REGISTRY

from madrassa.auth.resources import Resource, Role
from madrassa.main import app

pytestmark = pytest.mark.anyio


@pytest.fixture
def client(make_client):
    return make_client(app)


async def test_health(client):
    async with client:
        r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


async def test_ready_reports_matrix_loaded(client):
    async with client:
        r = await client.get("/ready")
    assert r.json() == {"status": "ok", "checks": {"permission_matrix": "ok"}}


async def test_me_requires_a_token(client):
    async with client:
        r = await client.get("/permissions/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


async def test_me_rejects_expired_token(client, auth_headers):
    async with client:
        r = await client.get(
            "/permissions/me",
            headers=auth_headers("teacher", expires_delta=timedelta(seconds=-1)),
        )
    assert r.status_code == 401


@pytest.mark.parametrize("role", ["janitor", None, "ADMIN"])
async def test_me_rejects_unrecognized_role_claim(client, auth_headers, role):
    async with client:
        r = await client.get("/permissions/me", headers=auth_headers(role))
    assert r.status_code == 401


async def test_me_for_guardian(client, auth_headers):
    async with client:
        r = await client.get("/permissions/me", headers=auth_headers(Role.GUARDIAN))
    assert r.status_code == 200

    body = r.json()
    assert body["role"] == "guardian"
    assert body["is_admin"] is False
    assert body["has_administrative_access"] is False
    assert body["can_access_management"] is False
    assert body["resources"]["payments"] == {
        "can_create": False,
        "can_read": True,
        "can_update": False,
        "can_delete": False,
        "can_manage": False,
    }
    assert set(body["resources"]) == {r.value for r in Resource}


async def test_me_for_secretariat(client, auth_headers):
    async with client:
        r = await client.get("/permissions/me", headers=auth_headers("secretariat"))
    body = r.json()
    assert body["has_administrative_access"] is True
    assert body["resources"]["students"]["can_delete"] is True
    assert body["resources"]["classes"]["can_manage"] is False


async def test_navigation_for_teacher(client, auth_headers):
    async with client:
        r = await client.get("/permissions/me/navigation", headers=auth_headers("teacher"))
    assert r.status_code == 200
    assert [item["path"] for item in r.json()] == [
        "/",
        "/students",
        "/guardians",
        "/courses",
        "/attendance",
        "/grading",
        "/reports",
        "/notifications",
    ]


@pytest.mark.parametrize(
    "role, resource, action, allowed",
    [
        ("teacher", "grades", "update", True),
        ("teacher", "payments", "read", False),
        ("guardian", "students", "delete", False),
        ("secretariat", "classes", "read", True),
        ("secretariat", "classes", "manage", False),
        ("admin", "studnets", "read", False),
        ("admin", "students", "export", False),
    ],
)
async def test_check(client, auth_headers, role, resource, action, allowed):
    async with client:
        r = await client.get(
            "/permissions/check",
            params={"resource": resource, "action": action},
            headers=auth_headers(role),
        )
    assert r.status_code == 200
    assert r.json() == {"resource": resource, "action": action, "allowed": allowed}


async def test_role_preview_for_admin(client, auth_headers):
    async with client:
        r = await client.get("/permissions/roles/student", headers=auth_headers("admin"))
    assert r.status_code == 200
    assert r.json()["permissions"] == {
        "attendance": ["read"],
        "grades": ["read"],
        "dashboard": ["read"],
        "notifications": ["read"],
    }


async def test_role_preview_unknown_role(client, auth_headers):
    async with client:
        r = await client.get("/permissions/roles/janitor", headers=auth_headers("admin"))
    assert r.status_code == 404


@pytest.mark.parametrize("role", ["secretariat", "teacher", "guardian", "student"])
async def test_role_preview_is_forbidden_without_settings_access(client, auth_headers, role):
    async with client:
        r = await client.get("/permissions/roles/admin", headers=auth_headers(role))
    assert r.status_code == 403
    # The denial does not reveal the grant that was missing.
    assert r.json() == {"detail": "Not authorized"}


def _denied_settings_checks() -> float:
    labels = {"resource": "settings", "outcome": "denied"}
    return REGISTRY.get_sample_value("authorization_checks_total", labels) or 0.0


async def test_metrics_count_guard_decisions(client, auth_headers):
    before = _denied_settings_checks()
    async with client:
        await client.get("/permissions/roles/admin", headers=auth_headers("student"))
        r = await client.get("/metrics")
    assert r.status_code == 200
    assert "authorization_checks_total" in r.text
    assert _denied_settings_checks() == before + 1
