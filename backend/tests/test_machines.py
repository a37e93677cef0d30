"""
Tests for machine CRUD and the admin status override.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_machines(client: AsyncClient, catalogue):
    response = await client.get("/api/machines")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 6
    assert data["cached"] is False  # Redis disabled in tests
    assert [m["id"] for m in data["machines"]] == ["1", "2", "3", "4", "5", "6"]
    assert data["machines"][0]["name"] == "Laser Cutter"


@pytest.mark.asyncio
async def test_list_machines_by_type(client: AsyncClient, catalogue):
    response = await client.get("/api/machines?type=Safety Cabinet")
    assert [m["id"] for m in response.json()["machines"]] == ["5"]


@pytest.mark.asyncio
async def test_get_machine_not_found(client: AsyncClient, catalogue):
    response = await client.get("/api/machines/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Machine not found"


@pytest.mark.asyncio
async def test_create_machine_takes_next_id(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/machines",
        json={
            "name": "CNC Router",
            "description": "3-axis router",
            "difficulty": "Advanced",
            "linked_course_id": "1",
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["id"] == "7"
    assert data["status"] == "Available"
    assert data["requires_certification"] is True

    second = await client.post(
        "/api/machines",
        json={"name": "Vinyl Cutter", "description": "Sticker maker"},
        headers=admin_headers,
    )
    assert second.json()["id"] == "8"


@pytest.mark.asyncio
async def test_create_machine_requires_admin(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/machines",
        json={"name": "CNC Router", "description": "3-axis router"},
        headers=auth_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_machine_invalid_difficulty(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/machines",
        json={"name": "CNC Router", "description": "3-axis router", "difficulty": "Expert"},
        headers=admin_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_machine(client: AsyncClient, admin_headers):
    response = await client.put(
        "/api/machines/2", json={"description": "Ultimaker S5"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["description"] == "Ultimaker S5"
    assert response.json()["name"] == "Ultimaker"


@pytest.mark.asyncio
async def test_status_override(client: AsyncClient, admin_headers):
    response = await client.put(
        "/api/machines/3/status",
        json={"status": "Maintenance", "maintenance_note": "Nozzle replacement"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Maintenance"

    status = await client.get("/api/machines/3/status")
    assert status.json() == {
        "machine_id": "3",
        "status": "Maintenance",
        "maintenance_note": "Nozzle replacement",
    }

    # Back to Available without a note clears it
    await client.put("/api/machines/3/status", json={"status": "Available"}, headers=admin_headers)
    status = await client.get("/api/machines/3/status")
    assert status.json()["status"] == "Available"
    assert status.json()["maintenance_note"] is None


@pytest.mark.asyncio
async def test_status_override_last_writer_wins(client: AsyncClient, admin_headers):
    await client.put("/api/machines/1/status", json={"status": "In Use"}, headers=admin_headers)
    await client.put("/api/machines/1/status", json={"status": "Maintenance"}, headers=admin_headers)

    listing = await client.get("/api/machines")
    laser = next(m for m in listing.json()["machines"] if m["id"] == "1")
    assert laser["status"] == "Maintenance"


@pytest.mark.asyncio
async def test_status_override_rejects_unknown_status(client: AsyncClient, admin_headers):
    response = await client.put(
        "/api/machines/1/status", json={"status": "Broken"}, headers=admin_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_status_override_requires_admin(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/machines/1/status", json={"status": "Maintenance"}, headers=auth_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_availability_unknown_machine(client: AsyncClient, catalogue, booking_day):
    response = await client.get(f"/api/machines/999/availability?date={booking_day.isoformat()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_availability_all_free(client: AsyncClient, catalogue, booking_day):
    response = await client.get(f"/api/machines/2/availability?date={booking_day.isoformat()}")
    data = response.json()
    assert data["available_slots"][0] == "9:00 AM"
    assert data["available_slots"][-1] == "4:00 PM"
    assert len(data["available_slots"]) == 8
    assert data["booked_slots"] == []


@pytest.mark.asyncio
async def test_health(client: AsyncClient, catalogue):
    for path in ("/health", "/api/health"):
        response = await client.get(path)
        assert response.status_code == 200
        assert response.json()["database"] == "connected"
        assert response.json()["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient, catalogue):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "learnit_booking_attempts_total" in response.text
