"""
User endpoints: own profile and password, admin user management.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.security import get_current_user, require_admin
from learnit.db.session import get_db
from learnit.models.user import User
from learnit.schemas.user import (
    AdminUserUpdate,
    MessageResponse,
    PasswordChange,
    ProfileUpdate,
    UserResponse,
)
from learnit.services import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.update_profile(db, user, data)
    return await user_service.to_user_response(db, user)


@router.put("/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.change_password(db, user, data)
    return MessageResponse(message="Password updated successfully")


@router.get("", response_model=list[UserResponse])
async def list_users(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    users = await user_service.list_users(db)
    return [await user_service.to_user_response(db, u) for u in users]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.get_user(db, user_id)
    return await user_service.to_user_response(db, user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: AdminUserUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.admin_update_user(db, user_id, data)
    return await user_service.to_user_response(db, user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await user_service.delete_user(db, user_id)
    return MessageResponse(message="User removed")
