"""
Tests for the eligibility rules, as a pure function and through the API.
"""

from types import SimpleNamespace

import pytest
from httpx import AsyncClient

from learnit.models.certification import Certification
from learnit.services.eligibility import Eligibility, compute_eligibility, is_bookable


def user(is_admin=False):
    return SimpleNamespace(id=1, is_admin=is_admin)


def machine(machine_id="1", type="Machine", requires_certification=True, linked_course_id="1"):
    return SimpleNamespace(
        id=machine_id,
        type=type,
        requires_certification=requires_certification,
        linked_course_id=linked_course_id,
    )


def test_admin_is_always_certified():
    assert compute_eligibility(user(is_admin=True), machine(), certifications=set()) is Eligibility.CERTIFIED


def test_without_safety_certification_everything_is_locked():
    assert compute_eligibility(user(), machine(), certifications=set()) is Eligibility.LOCKED
    # requires_certification does not lift the safety gate
    assert compute_eligibility(
        user(), machine(requires_certification=False), certifications=set()
    ) is Eligibility.LOCKED


def test_safety_machines_are_never_locked():
    cabinet = machine("5", type="Safety Cabinet", requires_certification=False, linked_course_id="5")
    course = machine("6", type="Safety Course", requires_certification=False, linked_course_id="6")
    assert compute_eligibility(user(), cabinet, certifications=set()) is not Eligibility.LOCKED
    assert compute_eligibility(user(), course, certifications=set()) is not Eligibility.LOCKED


def test_course_then_quiz_then_certified():
    safe = {"5"}
    assert compute_eligibility(user(), machine(), certifications=safe) is Eligibility.COURSE_REQUIRED
    assert compute_eligibility(
        user(), machine(), certifications=safe, completed_courses={"1"}
    ) is Eligibility.QUIZ_REQUIRED
    assert compute_eligibility(
        user(), machine(), certifications=safe | {"1"}, completed_courses={"1"}
    ) is Eligibility.CERTIFIED


def test_machine_without_linked_course_goes_straight_to_quiz():
    assert compute_eligibility(
        user(), machine(linked_course_id=None), certifications={"5"}
    ) is Eligibility.QUIZ_REQUIRED


def test_safety_gate_outranks_machine_certification():
    # A machine certification without the safety certification stays locked
    assert compute_eligibility(user(), machine(), certifications={"1"}) is Eligibility.LOCKED
    assert compute_eligibility(user(), machine(), certifications={"1", "5"}) is Eligibility.CERTIFIED


def test_no_certification_needed_after_safety():
    assert compute_eligibility(
        user(), machine(requires_certification=False), certifications={"5"}
    ) is Eligibility.CERTIFIED


def test_safety_certification_id_is_configurable():
    assert compute_eligibility(
        user(), machine(), certifications={"99"}, safety_certification_id="99"
    ) is Eligibility.COURSE_REQUIRED


def test_only_certified_is_bookable():
    assert is_bookable(Eligibility.CERTIFIED)
    for state in (Eligibility.LOCKED, Eligibility.COURSE_REQUIRED, Eligibility.QUIZ_REQUIRED):
        assert not is_bookable(state)


@pytest.mark.asyncio
async def test_eligibility_endpoint_for_new_user(client: AsyncClient, auth_headers):
    response = await client.get("/api/machines/eligibility", headers=auth_headers)
    assert response.status_code == 200
    by_id = {row["machine_id"]: row for row in response.json()}
    assert by_id["1"]["eligibility"] == "locked"
    assert by_id["1"]["bookable"] is False
    assert by_id["5"]["eligibility"] == "certified"
    assert by_id["6"]["eligibility"] == "certified"


@pytest.mark.asyncio
async def test_eligibility_follows_course_completion(
    client: AsyncClient, db_session, test_user, auth_headers
):
    db_session.add(Certification(user_id=test_user.id, machine_id="5"))
    await db_session.commit()

    before = await client.get("/api/machines/2/eligibility", headers=auth_headers)
    assert before.json()["eligibility"] == "course_required"

    done = await client.post("/api/courses/2/complete", headers=auth_headers)
    assert done.status_code == 200

    after = await client.get("/api/machines/2/eligibility", headers=auth_headers)
    assert after.json()["eligibility"] == "quiz_required"


@pytest.mark.asyncio
async def test_eligibility_requires_auth(client: AsyncClient, catalogue):
    response = await client.get("/api/machines/eligibility")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_machine_certification_without_safety_cannot_book(
    client: AsyncClient, db_session, test_user, auth_headers, booking_day
):
    db_session.add(Certification(user_id=test_user.id, machine_id="1"))
    await db_session.commit()

    response = await client.get("/api/machines/1/eligibility", headers=auth_headers)
    assert response.json()["eligibility"] == "locked"
    assert response.json()["bookable"] is False

    booking = await client.post(
        "/api/bookings",
        json={"machine_id": "1", "date": booking_day.isoformat(), "time_slot": "9:00 AM"},
        headers=auth_headers,
    )
    assert booking.status_code == 403
