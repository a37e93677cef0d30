"""
Certification grants.

A certification is a (user, machine) row with a unique constraint, so
granting twice leaves exactly one record. Call sites (admin grant, quiz
pass) all go through grant_certification.
"""

from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from learnit.models.certification import Certification
from learnit.models.machine import Machine
from learnit.models.user import User
from learnit.core.logging import get_logger
from learnit.core.metrics import record_certification_grant

logger = get_logger(__name__)


async def get_certification_ids(db: AsyncSession, user_id: int) -> list[str]:
    """Machine ids the user is certified for, in grant order."""
    result = await db.execute(
        select(Certification.machine_id)
        .where(Certification.user_id == user_id)
        .order_by(Certification.issued_at, Certification.id)
    )
    return list(result.scalars().all())


async def list_certifications(db: AsyncSession, user_id: int) -> list[Certification]:
    result = await db.execute(
        select(Certification)
        .where(Certification.user_id == user_id)
        .order_by(Certification.issued_at, Certification.id)
    )
    return list(result.scalars().all())


async def _find(db: AsyncSession, user_id: int, machine_id: str) -> Optional[Certification]:
    result = await db.execute(
        select(Certification).where(
            Certification.user_id == user_id,
            Certification.machine_id == machine_id,
        )
    )
    return result.scalar_one_or_none()


async def has_certification(db: AsyncSession, user_id: int, machine_id: str) -> bool:
    return await _find(db, user_id, machine_id) is not None


async def grant_certification(
    db: AsyncSession,
    user_id: int,
    machine_id: str,
    score: Optional[int] = None,
) -> tuple[Certification, bool]:
    """
    Grant (user, machine). Returns (certification, created).
    Raises 404 if the user or machine does not exist.
    """
    if await db.get(User, user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if await db.get(Machine, machine_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Machine not found")

    existing = await _find(db, user_id, machine_id)
    if existing:
        record_certification_grant(created=False)
        logger.info("certification_exists", user_id=user_id, machine_id=machine_id)
        return existing, False

    certification = Certification(user_id=user_id, machine_id=machine_id, score=score)
    db.add(certification)
    try:
        await db.flush()
    except IntegrityError:
        # Concurrent grant for the same pair won the insert
        await db.rollback()
        existing = await _find(db, user_id, machine_id)
        if existing is None:
            raise
        record_certification_grant(created=False)
        return existing, False

    await db.refresh(certification)
    record_certification_grant(created=True)
    logger.info("certification_granted", user_id=user_id, machine_id=machine_id, score=score)
    return certification, True


async def revoke_certification(db: AsyncSession, user_id: int, machine_id: str) -> bool:
    """Returns False when the user did not hold the certification."""
    if await db.get(User, user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    result = await db.execute(
        delete(Certification).where(
            Certification.user_id == user_id,
            Certification.machine_id == machine_id,
        )
    )
    removed = result.rowcount > 0
    logger.info("certification_revoked", user_id=user_id, machine_id=machine_id, removed=removed)
    return removed


async def clear_certifications(db: AsyncSession, user_id: int) -> int:
    if await db.get(User, user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    result = await db.execute(delete(Certification).where(Certification.user_id == user_id))
    logger.info("certifications_cleared", user_id=user_id, count=result.rowcount)
    return result.rowcount
