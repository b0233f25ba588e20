"""Seed script for development data.

Run against a running API with:  python -m leaveflow.seed [BASE_URL]
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
DEFAULT_PASSWORD = "leaveflow-dev"

USERS = [
    {"name": "Ada Admin", "email": "admin@example.com", "role": "admin", "leave_balance": 25},
    {"name": "Alice Johnson", "email": "alice.johnson@example.com", "role": "employee", "leave_balance": 25},
    {"name": "Bob Smith", "email": "bob.smith@example.com", "role": "employee", "leave_balance": 12},
]


def _next_monday(today: date) -> date:
    return today + timedelta(days=(7 - today.weekday()) or 7)


async def _register(client: httpx.AsyncClient, base_url: str, user: dict) -> None:
    """Register a user, tolerating an account that already exists."""
    resp = await client.post(f"{base_url}/auth/register", json={**user, "password": DEFAULT_PASSWORD})
    if resp.status_code == 201:
        print(f"  [OK] {user['name']} ({user['role']})")
    elif resp.status_code == 409:
        print(f"  [SKIP] {user['name']} (already exists)")
    else:
        print(f"  [ERROR] {user['name']}: {resp.status_code} {resp.text[:200]}")


async def _login(client: httpx.AsyncClient, base_url: str, email: str) -> dict[str, str]:
    resp = await client.post(f"{base_url}/auth/login", json={"email": email, "password": DEFAULT_PASSWORD})
    resp.raise_for_status()
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


async def seed_users(client: httpx.AsyncClient, base_url: str) -> None:
    print("\n--- Seeding users ---")
    for user in USERS:
        await _register(client, base_url, user)


async def seed_requests(client: httpx.AsyncClient, base_url: str) -> None:
    """Submit one pending request for Alice, skipped if she already has one."""
    print("\n--- Seeding leave requests ---")
    headers = await _login(client, base_url, "alice.johnson@example.com")

    existing = await client.get(f"{base_url}/leave-requests", headers=headers)
    existing.raise_for_status()
    if existing.json()["total"] > 0:
        print("  [SKIP] Alice already has leave requests")
        return

    start = _next_monday(date.today())
    resp = await client.post(
        f"{base_url}/leave-requests",
        json={
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=2)).isoformat(),
            "leave_type": "annual",
            "reason": "Family trip",
        },
        headers=headers,
    )
    if resp.status_code == 201:
        print(f"  [OK] Alice: {resp.json()['days']} day(s) annual leave (pending)")
    else:
        print(f"  [ERROR] Alice request: {resp.status_code} {resp.text[:200]}")


async def main(base_url: str = BASE_URL) -> None:
    print("=" * 60)
    print("  LeaveFlow - Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{base_url}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", base_url)
            sys.exit(1)

        await seed_users(client, base_url)
        await seed_requests(client, base_url)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print(f"  All seeded accounts use the password {DEFAULT_PASSWORD!r}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else BASE_URL))
