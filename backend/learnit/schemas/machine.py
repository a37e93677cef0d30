"""
Pydantic schemas for machines, status overrides, eligibility and availability.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from learnit.models.machine import MachineStatus, MachineType
from learnit.services.eligibility import Eligibility


class MachineBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: MachineType = MachineType.MACHINE
    description: str = Field(..., min_length=1)
    requires_certification: bool = True
    linked_course_id: Optional[str] = None
    linked_quiz_id: Optional[str] = None
    difficulty: Optional[str] = Field(None, pattern=r"^(Beginner|Intermediate|Advanced)$")
    image_url: Optional[str] = None


class MachineCreate(MachineBase):
    pass


class MachineUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[MachineType] = None
    description: Optional[str] = None
    requires_certification: Optional[bool] = None
    linked_course_id: Optional[str] = None
    linked_quiz_id: Optional[str] = None
    difficulty: Optional[str] = Field(None, pattern=r"^(Beginner|Intermediate|Advanced)$")
    image_url: Optional[str] = None


class MachineResponse(BaseModel):
    id: str
    name: str
    type: str
    description: str
    status: str
    maintenance_note: Optional[str]
    requires_certification: bool
    linked_course_id: Optional[str]
    linked_quiz_id: Optional[str]
    difficulty: Optional[str]
    image_url: Optional[str]
    updated_at: datetime

    model_config = {"from_attributes": True}


class MachineListResponse(BaseModel):
    machines: list[MachineResponse]
    total: int
    cached: bool = False


class MachineStatusUpdate(BaseModel):
    status: MachineStatus
    maintenance_note: Optional[str] = Field(None, max_length=1000)


class MachineStatusResponse(BaseModel):
    machine_id: str
    status: str
    maintenance_note: Optional[str] = None


class StatusChange(BaseModel):
    version: int
    machine_id: str
    status: str
    maintenance_note: Optional[str] = None
    changed_at: datetime


class StatusChangesResponse(BaseModel):
    version: int
    changes: list[StatusChange]


class EligibilityResponse(BaseModel):
    machine_id: str
    machine_name: str
    eligibility: Eligibility
    bookable: bool


class AvailabilityResponse(BaseModel):
    machine_id: str
    date: date
    available_slots: list[str]
    booked_slots: list[str]
