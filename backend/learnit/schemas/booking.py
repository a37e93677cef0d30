"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from learnit.models.booking import BookingStatus
from learnit.services.slots import TIME_SLOTS


class BookingCreate(BaseModel):
    machine_id: str = Field(..., min_length=1, max_length=50)
    date: date
    time_slot: str

    @field_validator("time_slot")
    @classmethod
    def known_slot(cls, v: str) -> str:
        v = v.strip()
        if v not in TIME_SLOTS:
            raise ValueError(f"time_slot must be one of: {', '.join(TIME_SLOTS)}")
        return v


class BookingResponse(BaseModel):
    id: int
    user_id: int
    machine_id: str
    date: date
    time_slot: str
    status: str
    user_name: Optional[str]
    machine_name: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingDeleteResponse(BaseModel):
    message: str
    booking_id: int
