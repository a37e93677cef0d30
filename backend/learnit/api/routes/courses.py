"""
Course endpoints: public catalogue, admin authoring, completion.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.security import get_current_user, require_admin
from learnit.db.session import get_db
from learnit.models.user import User
from learnit.schemas.course import (
    CourseCompletionResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
)
from learnit.schemas.user import MessageResponse
from learnit.services import course_service

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.get("", response_model=list[CourseResponse])
async def list_courses(db: AsyncSession = Depends(get_db)):
    return await course_service.list_courses(db)


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(course_id: str, db: AsyncSession = Depends(get_db)):
    return await course_service.get_course(db, course_id)


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await course_service.create_course(db, data)


@router.put("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: str,
    data: CourseUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await course_service.update_course(db, course_id, data)


@router.delete("/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await course_service.delete_course(db, course_id)
    return MessageResponse(message="Course removed")


@router.post("/{course_id}/complete", response_model=CourseCompletionResponse)
async def complete_course(
    course_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record that the current user finished the course; moves linked machines past course_required."""
    return await course_service.complete_course(db, user.id, course_id)
