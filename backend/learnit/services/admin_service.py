"""
Admin dashboard aggregates.
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.config import get_settings
from learnit.models.booking import Booking, BookingStatus
from learnit.models.machine import Machine, MachineType
from learnit.models.user import User
from learnit.schemas.admin import DashboardCounts, DashboardResponse
from learnit.schemas.booking import BookingResponse

RECENT_BOOKINGS_LIMIT = 5

_SAFETY_TYPES = (MachineType.SAFETY_CABINET.value, MachineType.SAFETY_COURSE.value)


async def _count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar_one()


async def get_dashboard(db: AsyncSession) -> DashboardResponse:
    settings = get_settings()
    bookable_machine = (
        Machine.id.not_in(settings.SAFETY_MACHINE_IDS),
        Machine.type.not_in(_SAFETY_TYPES),
    )

    counts = DashboardCounts(
        users=await _count(db, select(func.count(User.id))),
        machines=await _count(db, select(func.count(Machine.id)).where(*bookable_machine)),
        bookings=await _count(db, select(func.count(Booking.id))),
        pending_bookings=await _count(
            db,
            select(func.count(Booking.id)).where(Booking.status == BookingStatus.PENDING.value),
        ),
    )

    status_rows = await db.execute(
        select(Machine.status, func.count(Machine.id))
        .where(*bookable_machine)
        .group_by(Machine.status)
    )
    machine_statuses = {row[0]: row[1] for row in status_rows.all()}

    recent = await db.execute(
        select(Booking)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .limit(RECENT_BOOKINGS_LIMIT)
    )

    return DashboardResponse(
        counts=counts,
        machine_statuses=machine_statuses,
        recent_bookings=[BookingResponse.model_validate(b) for b in recent.scalars().all()],
    )
