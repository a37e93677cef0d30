"""
Booking service with race-free slot reservation.

CONCURRENCY STRATEGY: Reserve-if-free on a partial unique index
===============================================================

Problem:
  Two users look at the availability for machine 3 on 2025-06-01, both
  see "9:00 AM" free, both submit. A read-then-write check lets both
  inserts through. Result: double-booking.

Solution:
  The bookings table carries a partial unique index

      UNIQUE (machine_id, date, time_slot) WHERE status IN ('Pending', 'Approved')

  so the insert itself is the check-and-set:

  1. (fast path) look for an active booking on the slot -> 409
  2. (optional) Redis SET NX hold on the slot key -> 409 if held
  3. INSERT the Pending booking
  4. IntegrityError from the index -> rollback -> 409

  Step 1 and 2 only reject early. Step 3/4 is the guarantee, and it holds
  across processes and hosts because it lives in the database.

  Canceled, Rejected and Completed rows fall outside the index predicate,
  which frees the slot without deleting history.

STATE MACHINE
=============

  Pending  -> Approved | Rejected
  Approved -> Completed | Canceled
  Rejected, Completed, Canceled are terminal.

  Every transition is an admin action, except that the owner may cancel
  their own Approved booking. Nothing is time-triggered.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from learnit.models.booking import Booking, BookingStatus, ACTIVE_STATUSES
from learnit.models.machine import Machine
from learnit.models.user import User
from learnit.schemas.booking import BookingCreate
from learnit.services.eligibility import is_bookable
from learnit.services.machine_service import get_machine, get_machine_eligibility
from learnit.services.slots import free_slots, slot_key
from learnit.services.strategy_factory import get_admission
from learnit.core.logging import get_logger
from learnit.core.metrics import (
    booking_latency,
    record_admission,
    record_booking_attempt,
    record_booking_transition,
)

logger = get_logger(__name__)

SLOT_TAKEN_DETAIL = "This time slot is already booked"

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED}),
    BookingStatus.APPROVED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELED}),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELED: frozenset(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS[current]


async def get_booked_slots(db: AsyncSession, machine_id: str, day: date) -> list[str]:
    """Slots held by Pending/Approved bookings on that machine and day."""
    result = await db.execute(
        select(Booking.time_slot).where(
            Booking.machine_id == machine_id,
            Booking.date == day,
            Booking.status.in_(ACTIVE_STATUSES),
        )
    )
    return list(result.scalars().all())


async def get_availability(db: AsyncSession, machine_id: str, day: date) -> tuple[list[str], list[str]]:
    """Return (available, booked) for the day, both in template order."""
    await get_machine(db, machine_id)
    booked = await get_booked_slots(db, machine_id, day)
    available = free_slots(booked)
    booked_ordered = [slot for slot in free_slots([]) if slot not in available]
    return available, booked_ordered


async def _insert_booking(db: AsyncSession, user: User, machine: Machine, data: BookingCreate) -> Booking:
    booking = Booking(
        user_id=user.id,
        machine_id=machine.id,
        date=data.date,
        time_slot=data.time_slot,
        status=BookingStatus.PENDING.value,
        user_name=user.name,
        machine_name=machine.name,
    )
    # Rollback expires every loaded instance; log from plain values
    context = {"machine_id": machine.id, "date": str(data.date), "time_slot": data.time_slot}
    db.add(booking)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        record_booking_attempt("conflict")
        logger.warning("booking_conflict", stage="insert", **context)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SLOT_TAKEN_DETAIL)

    await db.refresh(booking)
    return booking


async def create_booking(db: AsyncSession, user: User, data: BookingCreate) -> Booking:
    """
    Reserve (machine, date, slot) for the user as a Pending booking.

    Raises:
        400 if the date is in the past
        404 if the machine does not exist
        403 if the user is not certified for the machine
        409 if the slot is held by a Pending/Approved booking
    """
    if data.date < date.today():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Booking date must not be in the past",
        )

    machine = await get_machine(db, data.machine_id)

    eligibility = await get_machine_eligibility(db, user, machine)
    if not is_bookable(eligibility):
        record_booking_attempt("ineligible")
        logger.warning(
            "booking_rejected_ineligible",
            user_id=user.id,
            machine_id=machine.id,
            eligibility=eligibility.value,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not certified to book this machine ({eligibility.value})",
        )

    with booking_latency.time():
        if data.time_slot in await get_booked_slots(db, machine.id, data.date):
            record_booking_attempt("conflict")
            logger.info(
                "booking_conflict",
                machine_id=machine.id,
                date=str(data.date),
                time_slot=data.time_slot,
                stage="precheck",
            )
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SLOT_TAKEN_DETAIL)

        admission = get_admission()
        key = slot_key(machine.id, data.date, data.time_slot)
        admitted = await admission.admit(key)
        record_admission(admitted)
        if not admitted:
            record_booking_attempt("conflict")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SLOT_TAKEN_DETAIL)

        try:
            booking = await _insert_booking(db, user, machine, data)
        finally:
            await admission.release(key)

    record_booking_attempt("success")
    logger.info(
        "booking_created",
        booking_id=booking.id,
        user_id=user.id,
        machine_id=machine.id,
        date=str(booking.date),
        time_slot=booking.time_slot,
    )
    return booking


async def get_user_bookings(db: AsyncSession, user_id: int) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def get_all_bookings(db: AsyncSession) -> list[Booking]:
    result = await db.execute(
        select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def _load_booking(db: AsyncSession, booking_id: int) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


async def get_booking(db: AsyncSession, booking_id: int, user: User) -> Booking:
    booking = await _load_booking(db, booking_id)
    if booking.user_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this booking",
        )
    return booking


async def _apply_transition(db: AsyncSession, booking: Booking, target: BookingStatus, actor: User) -> Booking:
    current = BookingStatus(booking.status)
    if not can_transition(current, target):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change booking from {current.value} to {target.value}",
        )

    booking.status = target.value
    await db.flush()
    await db.refresh(booking)

    record_booking_transition(target.value)
    logger.info(
        "booking_status_changed",
        booking_id=booking.id,
        previous=current.value,
        status=target.value,
        actor_id=actor.id,
    )
    return booking


async def update_booking_status(
    db: AsyncSession,
    booking_id: int,
    target: BookingStatus,
    admin: User,
) -> Booking:
    booking = await _load_booking(db, booking_id)
    return await _apply_transition(db, booking, target, admin)


async def cancel_booking(db: AsyncSession, booking_id: int, user: User) -> Booking:
    """
    Cancel a booking. Owners may cancel their Approved bookings; a Pending
    request can only be settled (approved/rejected) by an admin.
    """
    booking = await get_booking(db, booking_id, user)

    if booking.status == BookingStatus.CANCELED.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Booking is already canceled",
        )
    if not user.is_admin and booking.status == BookingStatus.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Pending bookings are approved or rejected by an administrator",
        )

    return await _apply_transition(db, booking, BookingStatus.CANCELED, user)


async def delete_booking(db: AsyncSession, booking_id: int) -> None:
    booking = await _load_booking(db, booking_id)
    await db.delete(booking)
    await db.flush()
    logger.info("booking_deleted", booking_id=booking_id, machine_id=booking.machine_id)
