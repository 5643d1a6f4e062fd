"""Shared fixtures: a throwaway SQLite database per test, test signing keys, an API client."""

import os
from typing import Optional

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.db.session import Base, configure_sqlite_transactions
from app.models.user import User, UserRole
from app.services import password_service
from app.services.token_service import TokenConfig, TokenService

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(scope="session")
def default_password_hash() -> str:
    """bcrypt at 12 rounds is slow; hash the shared test password once."""
    return password_service.hash_password(DEFAULT_PASSWORD)


@pytest.fixture
def token_config() -> TokenConfig:
    return TokenConfig(access_secret="test-access-secret", refresh_secret="test-refresh-secret")


@pytest.fixture
def token_service(token_config) -> TokenService:
    return TokenService(token_config)


@pytest_asyncio.fixture
async def engine(tmp_path):
    # One connection per session, like a real server
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    configure_sqlite_transactions(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory, default_password_hash):
    """Factory that commits a user in its own session and returns it."""

    async def _make_user(
        email: str = "a@x.com",
        name: str = "Alice Staff",
        role: UserRole = UserRole.STAFF,
        is_active: bool = True,
        password_hash: Optional[str] = "default",
    ) -> User:
        user = User(
            email=email,
            name=name,
            role=role,
            is_active=is_active,
            hashed_password=default_password_hash if password_hash == "default" else password_hash,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def client(session_factory, token_service):
    from main import app
    from app.core.dependencies import get_token_service
    from app.core.rate_limiter import rate_limiter
    from app.db.session import get_db

    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    rate_limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    rate_limiter.reset()
