"""
Tests for certification grants, lookups and revocation.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_grant_is_idempotent(client: AsyncClient, test_user, admin_headers):
    """Granting twice leaves exactly one certification."""
    payload = {"user_id": test_user.id, "machine_id": "2", "score": 85}

    first = await client.post("/api/certifications", json=payload, headers=admin_headers)
    assert first.status_code == 200
    assert first.json()["created"] is True
    assert first.json()["certification"]["score"] == 85

    second = await client.post("/api/certifications", json=payload, headers=admin_headers)
    assert second.status_code == 200
    assert second.json()["created"] is False

    listing = await client.get(f"/api/certifications/user/{test_user.id}", headers=admin_headers)
    assert [c["machine_id"] for c in listing.json()] == ["2"]


@pytest.mark.asyncio
async def test_grant_unknown_machine(client: AsyncClient, test_user, admin_headers):
    response = await client.post(
        "/api/certifications",
        json={"user_id": test_user.id, "machine_id": "404"},
        headers=admin_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_grant_requires_admin(client: AsyncClient, test_user, auth_headers):
    response = await client.post(
        "/api/certifications",
        json={"user_id": test_user.id, "machine_id": "1"},
        headers=auth_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_check_certification(client: AsyncClient, certified_headers):
    held = await client.get("/api/certifications/check?machine_id=1", headers=certified_headers)
    assert held.json() == {"machine_id": "1", "certified": True}

    missing = await client.get("/api/certifications/check?machine_id=3", headers=certified_headers)
    assert missing.json()["certified"] is False


@pytest.mark.asyncio
async def test_learner_reads_only_own_certifications(
    client: AsyncClient, certified_user, test_user, certified_headers
):
    own = await client.get(f"/api/certifications/user/{certified_user.id}", headers=certified_headers)
    assert own.status_code == 200
    assert sorted(c["machine_id"] for c in own.json()) == ["1", "5"]

    other = await client.get(f"/api/certifications/user/{test_user.id}", headers=certified_headers)
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_revoke_and_clear(client: AsyncClient, certified_user, admin_headers):
    revoke = await client.delete(
        f"/api/certifications/{certified_user.id}/1", headers=admin_headers
    )
    assert revoke.json()["success"] is True

    revoke_again = await client.delete(
        f"/api/certifications/{certified_user.id}/1", headers=admin_headers
    )
    assert revoke_again.json()["success"] is False

    clear = await client.delete(f"/api/certifications/user/{certified_user.id}", headers=admin_headers)
    assert clear.status_code == 200

    listing = await client.get(f"/api/certifications/user/{certified_user.id}", headers=admin_headers)
    assert listing.json() == []


@pytest.mark.asyncio
async def test_deleting_machine_drops_its_certifications(
    client: AsyncClient, certified_user, certified_headers, admin_headers
):
    response = await client.delete("/api/machines/1", headers=admin_headers)
    assert response.status_code == 200

    me = await client.get("/api/auth/me", headers=certified_headers)
    assert me.json()["certifications"] == ["5"]
