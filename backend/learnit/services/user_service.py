"""
User profile and admin user management.
"""

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from learnit.models.booking import Booking
from learnit.models.certification import Certification
from learnit.models.course import CourseCompletion
from learnit.models.user import User
from learnit.schemas.user import AdminUserUpdate, PasswordChange, ProfileUpdate, UserResponse
from learnit.services.certification_service import get_certification_ids
from learnit.core.security import hash_password, verify_password
from learnit.core.logging import get_logger

logger = get_logger(__name__)


async def to_user_response(db: AsyncSession, user: User) -> UserResponse:
    certifications = await get_certification_ids(db, user.id)
    return UserResponse.model_validate(user).model_copy(update={"certifications": certifications})


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def _ensure_email_free(db: AsyncSession, email: str, user_id: int) -> None:
    result = await db.execute(select(User.id).where(User.email == email, User.id != user_id))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    if data.name:
        user.name = data.name.strip()
    if data.email:
        email = data.email.strip().lower()
        await _ensure_email_free(db, email, user.id)
        user.email = email

    await db.flush()
    await db.refresh(user)
    logger.info("profile_updated", user_id=user.id)
    return user


async def admin_update_user(db: AsyncSession, user_id: int, data: AdminUserUpdate) -> User:
    user = await get_user(db, user_id)
    if data.name:
        user.name = data.name.strip()
    if data.email:
        email = data.email.strip().lower()
        await _ensure_email_free(db, email, user.id)
        user.email = email
    if data.is_admin is not None:
        user.is_admin = data.is_admin

    await db.flush()
    await db.refresh(user)
    logger.info("user_updated", user_id=user.id, is_admin=user.is_admin)
    return user


async def change_password(db: AsyncSession, user: User, data: PasswordChange) -> None:
    if not verify_password(data.current_password, user.hashed_password):
        logger.warning("password_change_rejected", user_id=user.id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    user.hashed_password = hash_password(data.new_password)
    await db.flush()
    logger.info("password_changed", user_id=user.id)


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Remove the user together with their certifications, bookings and course progress."""
    user = await get_user(db, user_id)

    await db.execute(delete(Certification).where(Certification.user_id == user_id))
    await db.execute(delete(Booking).where(Booking.user_id == user_id))
    await db.execute(delete(CourseCompletion).where(CourseCompletion.user_id == user_id))
    await db.delete(user)
    await db.flush()

    logger.info("user_deleted", user_id=user_id)
