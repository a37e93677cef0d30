"""
Booking model: one user, one machine, one daily slot.

Key design decisions:
- Partial unique index on (machine_id, date, time_slot) for Pending and
  Approved rows. This is the reserve-if-free guarantee: two concurrent
  inserts for the same slot cannot both commit, whatever the client saw.
- Canceled/Rejected/Completed rows drop out of the index, so the slot
  becomes bookable again without deleting history.
- user_name / machine_name are denormalised for admin listings.
"""

import enum

from sqlalchemy import Column, Integer, String, Date, ForeignKey, Index, CheckConstraint, text

from learnit.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"
    CANCELED = "Canceled"


ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.APPROVED.value)

_ACTIVE_PREDICATE = text("status IN ('Pending', 'Approved')")


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    machine_id = Column(
        String(50), ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False)
    time_slot = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    user_name = Column(String(100), nullable=True)
    machine_name = Column(String(255), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('Pending', 'Approved', 'Rejected', 'Completed', 'Canceled')",
            name="check_booking_status",
        ),
        Index(
            "uq_bookings_active_slot",
            "machine_id",
            "date",
            "time_slot",
            unique=True,
            postgresql_where=_ACTIVE_PREDICATE,
            sqlite_where=_ACTIVE_PREDICATE,
        ),
        Index("ix_bookings_machine_date", "machine_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, machine={self.machine_id}, "
            f"slot={self.date} {self.time_slot}, status={self.status})>"
        )
