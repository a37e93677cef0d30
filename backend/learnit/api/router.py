"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from learnit.api.routes import (
    admin,
    auth,
    bookings,
    certifications,
    courses,
    health,
    machines,
    quizzes,
    users,
)
from learnit.core.config import get_settings

api_router = APIRouter(prefix=get_settings().API_PREFIX)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(machines.router)
api_router.include_router(bookings.router)
api_router.include_router(certifications.router)
api_router.include_router(courses.router)
api_router.include_router(quizzes.router)
api_router.include_router(admin.router)
api_router.include_router(health.router)
