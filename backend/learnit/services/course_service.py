"""
Course CRUD and course completion tracking.
"""

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from learnit.models.course import Course, CourseCompletion
from learnit.schemas.course import CourseCreate, CourseUpdate
from learnit.services.identifiers import next_numeric_id
from learnit.core.logging import get_logger

logger = get_logger(__name__)


async def list_courses(db: AsyncSession) -> list[Course]:
    result = await db.execute(select(Course).order_by(Course.id))
    return list(result.scalars().all())


async def get_course(db: AsyncSession, course_id: str) -> Course:
    course = await db.get(Course, course_id)
    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


async def create_course(db: AsyncSession, data: CourseCreate) -> Course:
    course = Course(id=await next_numeric_id(db, Course), **data.model_dump())
    db.add(course)
    await db.flush()
    await db.refresh(course)

    logger.info("course_created", course_id=course.id, title=course.title)
    return course


async def update_course(db: AsyncSession, course_id: str, data: CourseUpdate) -> Course:
    course = await get_course(db, course_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(course, field, value)

    await db.flush()
    await db.refresh(course)
    logger.info("course_updated", course_id=course.id)
    return course


async def delete_course(db: AsyncSession, course_id: str) -> None:
    course = await get_course(db, course_id)
    await db.execute(delete(CourseCompletion).where(CourseCompletion.course_id == course_id))
    await db.delete(course)
    await db.flush()
    logger.info("course_deleted", course_id=course_id)


async def get_completed_course_ids(db: AsyncSession, user_id: int) -> list[str]:
    result = await db.execute(
        select(CourseCompletion.course_id).where(CourseCompletion.user_id == user_id)
    )
    return list(result.scalars().all())


async def complete_course(db: AsyncSession, user_id: int, course_id: str) -> CourseCompletion:
    """Mark the course complete for the user. Repeat calls return the first record."""
    await get_course(db, course_id)

    result = await db.execute(
        select(CourseCompletion).where(
            CourseCompletion.user_id == user_id,
            CourseCompletion.course_id == course_id,
        )
    )
    completion = result.scalar_one_or_none()
    if completion:
        return completion

    completion = CourseCompletion(user_id=user_id, course_id=course_id)
    db.add(completion)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        result = await db.execute(
            select(CourseCompletion).where(
                CourseCompletion.user_id == user_id,
                CourseCompletion.course_id == course_id,
            )
        )
        return result.scalar_one()

    await db.refresh(completion)
    logger.info("course_completed", user_id=user_id, course_id=course_id)
    return completion
