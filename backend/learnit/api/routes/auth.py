"""
Authentication endpoints: register, login and the current user.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.security import get_current_user
from learnit.db.session import get_db
from learnit.models.user import User
from learnit.schemas.user import UserCreate, UserLogin, UserResponse, LoginResponse
from learnit.services.auth_service import register_user, authenticate_user
from learnit.services.user_service import to_user_response

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new learner account. New accounts hold no certifications."""
    user = await register_user(db, user_data)
    return await to_user_response(db, user)


@router.post("/login", response_model=LoginResponse)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token with the user profile."""
    token, user = await authenticate_user(db, login_data)
    return LoginResponse(access_token=token, user=await to_user_response(db, user))


@router.get("/me", response_model=UserResponse)
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await to_user_response(db, user)
