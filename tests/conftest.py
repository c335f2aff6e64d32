"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI without a server:

1. Each test gets its own SQLite (aiosqlite) in-memory engine with all
   tables created from Base.metadata. StaticPool keeps the single
   connection alive, so every session sees the same database.
2. get_db is overridden to yield the test session, so services that
   commit() really commit, and the test can read back what they wrote.
3. The engine is disposed after the test and the data vanishes with it.

bcrypt rounds are lowered before quill is imported; hashing at the
production work factor would dominate the run time.
"""

import os

os.environ.setdefault("QUILL_BCRYPT_ROUNDS", "4")
os.environ.setdefault("QUILL_ENVIRONMENT", "development")

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from quill.auth.dependencies import CurrentIdentity, get_current_user  # noqa: E402
from quill.db.engine import get_db  # noqa: E402
from quill.db.models import Base, User  # noqa: E402
from quill.main import app  # noqa: E402
from quill.services.user_service import UserService  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

TEST_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
TEST_USERNAME = "tester"
TEST_PASSWORD = "correct horse battery"


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session over a freshly created schema."""
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        try:
            yield session
        finally:
            await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture()
async def current_user(db_session) -> User:
    """The user the `client` fixture authenticates as, with a credential."""
    return await UserService(db_session).register(
        username=TEST_USERNAME,
        email="tester@example.com",
        password=TEST_PASSWORD,
        user_id=TEST_USER_ID,
    )


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db and auth overridden for testing.

    Learn: get_current_user is replaced with a fixed identity, so write
    routes work without minting real tokens. Tests that create content
    as that identity also request `current_user` so the row exists.
    """
    async def override_get_db():
        yield db_session

    def override_get_current_user():
        return CurrentIdentity(user_id=str(TEST_USER_ID), username=TEST_USERNAME)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauthenticated_client(db_session):
    """HTTP client WITHOUT auth override — for the real token pipeline.

    Only get_db is overridden; every Bearer token goes through signature,
    expiry and password-change checks exactly as in production.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
