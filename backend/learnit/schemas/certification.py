"""
Pydantic schemas for certification grants and lookups.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class CertificationGrant(BaseModel):
    user_id: int
    machine_id: str = Field(..., min_length=1, max_length=50)
    score: Optional[int] = Field(None, ge=0, le=100)


class CertificationResponse(BaseModel):
    user_id: int
    machine_id: str
    score: Optional[int]
    issued_at: datetime

    model_config = {"from_attributes": True}


class CertificationGrantResponse(BaseModel):
    success: bool = True
    created: bool
    message: str
    certification: CertificationResponse


class CertificationCheck(BaseModel):
    machine_id: str
    certified: bool
