"""
Booking endpoints with race-free slot reservation.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.security import get_current_user, require_admin
from learnit.db.session import get_db
from learnit.models.user import User
from learnit.schemas.booking import (
    BookingCreate,
    BookingDeleteResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from learnit.services import booking_service

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Request a machine slot. The booking starts Pending until an admin
    approves it.

    The slot is reserved atomically: of two simultaneous requests for the
    same machine/date/slot exactly one succeeds, the other gets 409.
    """
    return await booking_service.create_booking(db, user, booking_data)


@router.get("", response_model=list[BookingResponse])
async def list_my_bookings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.get_user_bookings(db, user.id)


@router.get("/all", response_model=list[BookingResponse])
async def list_all_bookings(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.get_all_bookings(db)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.get_booking(db, booking_id, user)


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Approve, reject, complete or cancel. Illegal transitions return 409."""
    return await booking_service.update_booking_status(db, booking_id, data.status, admin)


@router.put("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel an Approved booking and free its slot."""
    return await booking_service.cancel_booking(db, booking_id, user)


@router.delete("/{booking_id}", response_model=BookingDeleteResponse)
async def delete_booking(
    booking_id: int,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await booking_service.delete_booking(db, booking_id)
    return BookingDeleteResponse(message="Booking deleted successfully", booking_id=booking_id)
