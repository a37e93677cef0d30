"""
Certification endpoints. Grants and revocations are admin actions; the
quiz flow grants through the same service.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.security import get_current_user, require_admin
from learnit.db.session import get_db
from learnit.models.user import User
from learnit.schemas.certification import (
    CertificationCheck,
    CertificationGrant,
    CertificationGrantResponse,
    CertificationResponse,
)
from learnit.schemas.user import MessageResponse
from learnit.services import certification_service

router = APIRouter(prefix="/certifications", tags=["Certifications"])


@router.post("", response_model=CertificationGrantResponse)
async def grant(
    data: CertificationGrant,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Idempotent: granting an existing certification returns it with created=false."""
    certification, created = await certification_service.grant_certification(
        db, data.user_id, data.machine_id, score=data.score
    )
    return CertificationGrantResponse(
        created=created,
        message="Certification added successfully" if created else "User already has this certification",
        certification=CertificationResponse.model_validate(certification),
    )


@router.get("/check", response_model=CertificationCheck)
async def check(
    machine_id: str = Query(..., min_length=1),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    certified = await certification_service.has_certification(db, user.id, machine_id)
    return CertificationCheck(machine_id=machine_id, certified=certified)


@router.get("/user/{user_id}", response_model=list[CertificationResponse])
async def list_for_user(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if user.id != user_id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view these certifications",
        )
    return await certification_service.list_certifications(db, user_id)


@router.delete("/user/{user_id}", response_model=MessageResponse)
async def clear(
    user_id: int,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    count = await certification_service.clear_certifications(db, user_id)
    return MessageResponse(message=f"Removed {count} certifications")


@router.delete("/{user_id}/{machine_id}", response_model=MessageResponse)
async def revoke(
    user_id: int,
    machine_id: str,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    removed = await certification_service.revoke_certification(db, user_id, machine_id)
    message = "Certification removed successfully" if removed else "User does not have this certification"
    return MessageResponse(success=removed, message=message)
