"""Tests for user listing, lookup and admin balance overrides."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leaveflow.models.audit import AuditLog

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

PASSWORD = "secret-pass"


async def _register_and_login(
    client: AsyncClient,
    name: str,
    email: str,
    role: str = "employee",
    leave_balance: int = 25,
) -> tuple[str, dict[str, str]]:
    """Return (user_id, auth headers)."""
    resp = await client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": PASSWORD, "role": role, "leave_balance": leave_balance},
    )
    assert resp.status_code == 201, resp.json()
    login = await client.post("/auth/login", json={"email": email, "password": PASSWORD})
    return resp.json()["id"], {"Authorization": f"Bearer {login.json()['access_token']}"}


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------


async def test_users_me(async_client: AsyncClient) -> None:
    user_id, headers = await _register_and_login(async_client, "Eve Employee", "eve@example.com", leave_balance=12)
    resp = await async_client.get("/users/me", headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == user_id
    assert data["leave_balance"] == 12
    assert data["role"] == "employee"


# ---------------------------------------------------------------------------
# Admin listing and lookup
# ---------------------------------------------------------------------------


async def test_list_users_admin(async_client: AsyncClient) -> None:
    _, admin = await _register_and_login(async_client, "Ada Admin", "admin@example.com", role="admin")
    await _register_and_login(async_client, "Bob Smith", "bob@example.com")
    await _register_and_login(async_client, "Alice Johnson", "alice@example.com")

    resp = await async_client.get("/users", headers=admin)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 3
    assert [u["name"] for u in data["items"]] == ["Ada Admin", "Alice Johnson", "Bob Smith"]


async def test_list_users_employee_forbidden(async_client: AsyncClient) -> None:
    _, employee = await _register_and_login(async_client, "Eve Employee", "eve@example.com")
    resp = await async_client.get("/users", headers=employee)
    assert resp.status_code == 403
    assert resp.json()["error"] == "Forbidden"


async def test_get_user_admin(async_client: AsyncClient) -> None:
    _, admin = await _register_and_login(async_client, "Ada Admin", "admin@example.com", role="admin")
    user_id, _ = await _register_and_login(async_client, "Eve Employee", "eve@example.com")

    resp = await async_client.get(f"/users/{user_id}", headers=admin)
    assert resp.status_code == 200
    assert resp.json()["email"] == "eve@example.com"


async def test_get_unknown_user(async_client: AsyncClient) -> None:
    _, admin = await _register_and_login(async_client, "Ada Admin", "admin@example.com", role="admin")
    resp = await async_client.get(f"/users/{uuid.uuid4()}", headers=admin)
    assert resp.status_code == 404
    assert resp.json()["error"] == "UserNotFound"


# ---------------------------------------------------------------------------
# Balance override
# ---------------------------------------------------------------------------


async def test_override_balance(async_client: AsyncClient, db_session: AsyncSession) -> None:
    admin_id, admin = await _register_and_login(async_client, "Ada Admin", "admin@example.com", role="admin")
    user_id, employee = await _register_and_login(async_client, "Eve Employee", "eve@example.com", leave_balance=5)

    resp = await async_client.patch(f"/users/{user_id}/leave-balance", json={"leave_balance": 18}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["leave_balance"] == 18

    me = await async_client.get("/users/me", headers=employee)
    assert me.json()["leave_balance"] == 18

    result = await db_session.execute(
        select(AuditLog).where(
            col(AuditLog.entity_id) == uuid.UUID(user_id),
            col(AuditLog.action) == "BALANCE_OVERRIDE",
        )
    )
    audit = result.scalar_one()
    assert audit.actor_id == uuid.UUID(admin_id)
    assert audit.before_json is not None
    assert audit.before_json["leave_balance"] == 5
    assert audit.after_json is not None
    assert audit.after_json["leave_balance"] == 18


async def test_override_balance_negative_rejected(async_client: AsyncClient) -> None:
    _, admin = await _register_and_login(async_client, "Ada Admin", "admin@example.com", role="admin")
    user_id, _ = await _register_and_login(async_client, "Eve Employee", "eve@example.com")

    resp = await async_client.patch(f"/users/{user_id}/leave-balance", json={"leave_balance": -1}, headers=admin)
    assert resp.status_code == 422


async def test_override_balance_employee_forbidden(async_client: AsyncClient) -> None:
    user_id, employee = await _register_and_login(async_client, "Eve Employee", "eve@example.com")
    resp = await async_client.patch(f"/users/{user_id}/leave-balance", json={"leave_balance": 99}, headers=employee)
    assert resp.status_code == 403
