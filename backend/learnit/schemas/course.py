"""
Pydantic schemas for courses.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = "General"
    content: str = ""
    image_url: Optional[str] = None
    related_machine_ids: list[str] = []
    quiz_id: Optional[str] = None
    difficulty: str = "Beginner"


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    related_machine_ids: Optional[list[str]] = None
    quiz_id: Optional[str] = None
    difficulty: Optional[str] = None


class CourseResponse(BaseModel):
    id: str
    title: str
    description: str
    category: str
    content: str
    image_url: Optional[str]
    related_machine_ids: list[str]
    quiz_id: Optional[str]
    difficulty: str

    model_config = {"from_attributes": True}


class CourseCompletionResponse(BaseModel):
    course_id: str
    completed_at: datetime

    model_config = {"from_attributes": True}
