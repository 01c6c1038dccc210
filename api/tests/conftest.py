"""Pytest configuration and shared fixtures.

This module provides:
- A throwaway SQLite database (file per test, via aiosqlite) with tables created
- Session factory and session fixtures for repository tests
- Resources wired against the test database
- FastAPI test client for route integration tests
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./estate_test.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from core.config import Settings, clear_settings_cache
from core.database import create_engine, create_session_maker, create_tables
from resources import Resources, build_resources

# Low PBKDF2 work factor keeps user tests fast
TEST_HASH_ITERATIONS = 1_000


# =============================================================================
# Test Settings
# =============================================================================


@pytest.fixture
def test_database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'estate_test.db'}"


@pytest.fixture
def test_settings(test_database_url: str) -> Settings:
    """Settings pointing at the per-test SQLite file."""
    return Settings(
        database_url=test_database_url,
        password_hash_iterations=TEST_HASH_ITERATIONS,
        cors_allowed_origins="",
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Engine over a fresh database file with all tables created."""
    engine = create_engine(test_settings)
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(test_engine)


@pytest_asyncio.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session for arranging test data.

    Repositories open their own sessions, so data created here must be
    committed (``tests.factories.create_async`` does that).
    """
    async with session_maker() as session:
        yield session


@pytest.fixture
def resources(
    session_maker: async_sessionmaker[AsyncSession], test_settings: Settings
) -> Resources:
    return build_resources(session_maker, settings=test_settings)


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def app(
    test_engine: AsyncEngine,
    session_maker: async_sessionmaker[AsyncSession],
    resources: Resources,
) -> AsyncGenerator[FastAPI]:
    """FastAPI app wired to the test database.

    httpx's ASGITransport does not run the lifespan, so the state it
    would set up is assigned here.
    """
    from main import app as fastapi_app

    fastapi_app.state.engine = test_engine
    fastapi_app.state.session_maker = session_maker
    fastapi_app.state.resources = resources

    yield fastapi_app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing routes."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio backend for anyio (required by httpx)."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
