"""
Tests for profile, password and admin user management.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/users/profile", json={"name": "Renamed", "email": "Renamed@Example.com"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["email"] == "renamed@example.com"


@pytest.mark.asyncio
async def test_update_profile_email_taken(client: AsyncClient, auth_headers, certified_user):
    response = await client.put(
        "/api/users/profile", json={"email": "certified@example.com"}, headers=auth_headers
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient, test_user, auth_headers):
    wrong = await client.put(
        "/api/users/password",
        json={"current_password": "nope", "new_password": "newsecret"},
        headers=auth_headers,
    )
    assert wrong.status_code == 401

    ok = await client.put(
        "/api/users/password",
        json={"current_password": "testpassword123", "new_password": "newsecret"},
        headers=auth_headers,
    )
    assert ok.status_code == 200

    login = await client.post(
        "/api/auth/login", json={"email": "test@example.com", "password": "newsecret"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_admin_lists_users(client: AsyncClient, test_user, admin_headers, auth_headers):
    response = await client.get("/api/users", headers=admin_headers)
    assert response.status_code == 200
    emails = {u["email"] for u in response.json()}
    assert {"test@example.com", "admin@example.com"} <= emails

    forbidden = await client.get("/api/users", headers=auth_headers)
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_admin_promotes_user(client: AsyncClient, test_user, admin_headers):
    response = await client.put(
        f"/api/users/{test_user.id}", json={"is_admin": True}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["is_admin"] is True


@pytest.mark.asyncio
async def test_admin_deletes_user_with_bookings(
    client: AsyncClient, certified_user, certified_headers, admin_headers, booking_day
):
    await client.post(
        "/api/bookings",
        json={"machine_id": "1", "date": booking_day.isoformat(), "time_slot": "9:00 AM"},
        headers=certified_headers,
    )

    response = await client.delete(f"/api/users/{certified_user.id}", headers=admin_headers)
    assert response.status_code == 200

    assert (await client.get(f"/api/users/{certified_user.id}", headers=admin_headers)).status_code == 404
    assert (await client.get("/api/bookings/all", headers=admin_headers)).json() == []

    # Token of a deleted user no longer authenticates
    me = await client.get("/api/auth/me", headers=certified_headers)
    assert me.status_code == 401
