"""
Registration and login.

Emails are stored lower-cased (the schemas normalise them), so lookups are
exact matches. A failed login never says whether the email exists.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from learnit.models.user import User
from learnit.schemas.user import UserCreate, UserLogin
from learnit.core.security import hash_password, verify_password, create_access_token
from learnit.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_NAME = "User"


async def find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """New accounts are learners with no certifications; 409 on a taken email."""
    if await find_user_by_email(db, user_data.email) is not None:
        logger.warning("registration_rejected", reason="email_exists", email=user_data.email)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user = User(
        name=user_data.name.strip() or DEFAULT_NAME,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        is_admin=False,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> tuple[str, User]:
    user = await find_user_by_email(db, login_data.email)
    if user is None or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_rejected", email=login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user.last_login = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(user)

    logger.info("user_logged_in", user_id=user.id, is_admin=user.is_admin)
    return create_access_token(data={"sub": str(user.id)}), user
