"""
Pytest fixtures for test database, client, and authentication.

Tests run against a throwaway SQLite file through aiosqlite so the partial
unique index and real per-request sessions are exercised without a
Postgres server. Redis is disabled; every Redis path fails open.
"""

import os
import tempfile
from datetime import date, timedelta
from typing import AsyncGenerator

_TEST_DB_DIR = tempfile.mkdtemp(prefix="learnit-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/learnit_test.db"
os.environ["REDIS_ENABLED"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["ADMISSION_STRATEGY"] = "optimistic"
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.main import app
from learnit.db.base import Base
from learnit.db.seed import seed_courses, seed_machines, seed_quizzes
from learnit.db.session import AsyncSessionLocal, engine
from learnit.core.security import create_access_token, hash_password
from learnit.models.certification import Certification
from learnit.models.machine import Machine
from learnit.models.user import User
from learnit.services.status_feed import reset_status_feed

PASSWORD = "testpassword123"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session for fixture data, then drop everything."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections belong to this test's event loop
    await engine.dispose()


@pytest.fixture(autouse=True)
def fresh_status_feed():
    reset_status_feed()
    yield
    reset_status_feed()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app; each request gets its own session via get_db."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def make_user(
    session: AsyncSession,
    email: str,
    name: str = "Test User",
    is_admin: bool = False,
    certifications: tuple[str, ...] = (),
) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(PASSWORD),
        is_admin=is_admin,
    )
    session.add(user)
    await session.flush()
    for machine_id in certifications:
        session.add(Certification(user_id=user.id, machine_id=machine_id))
    await session.commit()
    await session.refresh(user)
    return user


def headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def catalogue(db_session: AsyncSession) -> list[Machine]:
    """The six core machines with their courses and quizzes."""
    await seed_machines(db_session)
    await seed_courses(db_session)
    await seed_quizzes(db_session)
    await db_session.commit()
    return [await db_session.get(Machine, str(i)) for i in range(1, 7)]


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession, catalogue) -> User:
    """A freshly registered learner: no certifications."""
    return await make_user(db_session, "test@example.com", name="Test Learner")


@pytest_asyncio.fixture
async def certified_user(db_session: AsyncSession, catalogue) -> User:
    """Holds the safety certification and the laser cutter certification."""
    return await make_user(
        db_session, "certified@example.com", name="Certified Maker", certifications=("5", "1")
    )


@pytest_asyncio.fixture
async def second_certified_user(db_session: AsyncSession, catalogue) -> User:
    return await make_user(
        db_session, "second@example.com", name="Second Maker", certifications=("5", "1")
    )


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession, catalogue) -> User:
    return await make_user(db_session, "admin@example.com", name="Admin", is_admin=True)


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest_asyncio.fixture
async def certified_headers(certified_user: User) -> dict:
    return headers_for(certified_user)


@pytest_asyncio.fixture
async def second_headers(second_certified_user: User) -> dict:
    return headers_for(second_certified_user)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest.fixture
def booking_day() -> date:
    return date.today() + timedelta(days=7)
