"""
Admin dashboard response schema.
"""

from pydantic import BaseModel

from learnit.schemas.booking import BookingResponse


class DashboardCounts(BaseModel):
    users: int
    machines: int
    bookings: int
    pending_bookings: int


class DashboardResponse(BaseModel):
    counts: DashboardCounts
    machine_statuses: dict[str, int]
    recent_bookings: list[BookingResponse]
