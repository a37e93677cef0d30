"""
Admin dashboard.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.security import require_admin
from learnit.db.session import get_db
from learnit.models.user import User
from learnit.schemas.admin import DashboardResponse
from learnit.services.admin_service import get_dashboard

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await get_dashboard(db)
