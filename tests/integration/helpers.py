"""Shared request helpers for integration flows."""

import uuid

from httpx import AsyncClient


def unique_user() -> dict[str, str]:
    """Fresh credentials per call to avoid test pollution."""
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"voter_{uid}",
        "email": f"voter_{uid}@example.com",
        "password": "TestPass1",
    }


async def login_headers(client: AsyncClient) -> dict[str, str]:
    """Register a new user and return its Authorization header."""
    user = unique_user()
    await client.post("/api/v1/auth/register", json=user)
    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": user["username"], "password": user["password"]},
    )
    return {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}
