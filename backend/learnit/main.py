"""
Learnit API - Main Application Entry Point

Makerspace backend for the web and mobile clients:
- Certification gating (safety course -> course -> quiz -> certification)
- Race-free machine slot booking on a partial unique index
- Admin machine status override with a long-poll change feed
- Redis caching of the machine catalogue, structured logging, Prometheus metrics
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnit.core.config import get_settings
from learnit.core.logging import setup_logging, get_logger
from learnit.core.metrics import metrics_endpoint
from learnit.api.router import api_router
from learnit.api.middleware import RequestLoggingMiddleware
from learnit.api.routes.health import health_check
from learnit.db.seed import seed_defaults
from learnit.db.session import AsyncSessionLocal
from learnit.infrastructure.redis_client import get_redis, close_redis

settings = get_settings()


async def run_seed() -> None:
    async with AsyncSessionLocal() as session:
        try:
            await seed_defaults(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache or slot holds")

    if settings.SEED_ON_STARTUP:
        await run_seed()

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Makerspace certification and machine booking API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)

# Load balancers probe the root path
app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
