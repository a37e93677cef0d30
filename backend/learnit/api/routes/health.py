"""
Health check, mounted under the API prefix and at the root.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.config import get_settings
from learnit.core.logging import get_logger
from learnit.db.session import get_db
from learnit.services.cache_service import get_cache_stats

logger = get_logger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check for Docker, load balancers and the clients' connectivity probe."""
    settings = get_settings()
    try:
        await db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.error("health_database_error", error=str(e))
        database = "error"

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "cache": await get_cache_stats(),
    }
