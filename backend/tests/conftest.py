"""
WebVault Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test that touches the database gets a fresh in-memory SQLite
       database (aiosqlite + StaticPool) with the full schema created from
       the ORM metadata. Endpoint tests talk to the real FastAPI app through
       httpx's ASGITransport with `get_db_session` overridden to use that
       database.

Fixture Hierarchy:
    engine            fresh in-memory database per test
    ├── session_factory
    │   ├── db_session    one AsyncSession for service-level tests
    │   └── test_client   AsyncClient wired to the app
    └── make_website / make_tag   row builders
"""

import os

# Settings are read at import time; configure before importing webvault
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["IDENTITY_SECRET_KEY"] = ""
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "0"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import webvault.models  # noqa: F401
from webvault.database import Base, get_db_session
from webvault.models.tag import Tag
from webvault.models.website import Website
from webvault.utils import dump_json_list

SESSION_ID = "sess_test_admin"


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    A session for calling services directly.

    Usage:
        async def test_something(db_session):
            result = await tag_service.list_tags(db_session)
    """
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient bound to the app, using the test database.

    The override commits on success and rolls back on error, exactly like
    the production dependency.
    """
    from webvault.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {SESSION_ID}"}


# ══════════════════════════════════════════════════════════════════════════
# Row Builders
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_website(session_factory):
    """
    Insert a website and return it. Defaults produce a publicly visible row.

    Usage:
        site = await make_website(title="Docs", rating=4, is_featured=True)
    """
    counter = {"n": 0}

    async def _make(**overrides) -> Website:
        counter["n"] += 1
        tags = overrides.pop("tags", [])
        values = {
            "title": f"Website {counter['n']}",
            "url": f"https://site{counter['n']}.example.com",
            "status": "active",
            "review_status": "approved",
            "is_public": True,
            "tags": dump_json_list(tags),
        }
        values.update(overrides)
        async with session_factory() as session:
            website = Website(**values)
            session.add(website)
            await session.commit()
            return website

    return _make


@pytest.fixture
def make_tag(session_factory):
    async def _make(name: str, **overrides) -> Tag:
        values = {"name": name, "slug": name.lower().replace(" ", "-"), "status": "active"}
        values.update(overrides)
        async with session_factory() as session:
            tag = Tag(**values)
            session.add(tag)
            await session.commit()
            return tag

    return _make
