"""
Shared fixtures: in-memory SQLite, a patched Redis, the real app with the
session dependency overridden, and small factories for test rows.
"""

from __future__ import annotations

import os

os.environ.setdefault("BVL_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BVL_AUTH_JWT_SECRET", "test-secret-with-enough-bytes-for-hs256")
os.environ.setdefault("BVL_AUTH_PROVIDER_URL", "http://auth.test/auth/v1")
os.environ.setdefault("BVL_LOG_FORMAT", "text")
os.environ.setdefault("BVL_LOG_LEVEL", "warning")

import uuid
from datetime import datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, select

from app.core.auth import create_session_token
from app.core.database import get_session
from app.models.announcement import Announcement
from app.models.event import Event
from app.models.organization import Organization
from app.models.organization_member import OrganizationMember
from app.models.user import User


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """A session for assertions in tests that call services directly."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def mock_redis():
    """Nothing is revoked unless a test says so."""
    redis = AsyncMock()
    redis.exists = AsyncMock(return_value=0)
    redis.setex = AsyncMock()
    redis.ping = AsyncMock(return_value=True)
    with patch("app.core.auth.get_redis", return_value=redis), \
            patch("app.main.get_redis", return_value=redis):
        yield redis


# ---------------------------------------------------------------------------
# App + client
# ---------------------------------------------------------------------------

@pytest.fixture
def app(session_factory):
    from app.main import app as fastapi_app

    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _get_session
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def auth_headers(auth_user_id: str, email: Optional[str] = None) -> dict:
    """Bearer session for ``auth_user_id`` (Bearer requests skip CSRF)."""
    token, _ = create_session_token(auth_user_id, email or f"{auth_user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

class Factory:
    """Creates committed rows, each in its own short-lived session."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def _save(self, obj):
        async with self._session_factory() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def user(self, name: str = "Pat Player", **kwargs) -> User:
        auth_user_id = kwargs.pop("auth_user_id", None) or f"auth-{uuid.uuid4().hex[:12]}"
        now = datetime.now(timezone.utc)
        fields = dict(
            auth_user_id=auth_user_id,
            email=f"{auth_user_id}@example.com",
            name=name,
            gender="FEMALE",
            skill_level="INTERMEDIATE",
            is_over_18=True,
            tos_accepted_at=now,
            tos_version="1.0",
            privacy_policy_accepted_at=now,
            privacy_policy_version="1.0",
        )
        fields.update(kwargs)
        return await self._save(User(**fields))

    async def org(self, slug: str = "sunset-beach", **kwargs) -> Organization:
        fields = dict(
            name="Sunset Beach VB",
            slug=slug,
            join_code=uuid.uuid4().hex[:8].upper(),
            timezone="America/Los_Angeles",
        )
        fields.update(kwargs)
        return await self._save(Organization(**fields))

    async def member(self, user: User, org: Organization, role: str = "MEMBER") -> OrganizationMember:
        return await self._save(
            OrganizationMember(user_id=user.id, organization_id=org.id, role=role)
        )

    async def event(self, org: Organization, name: str = "Summer League", **kwargs) -> Event:
        fields = dict(
            organization_id=org.id,
            name=name,
            type="LEAGUE",
            status="ACTIVE",
            visibility="PUBLIC",
        )
        fields.update(kwargs)
        return await self._save(Event(**fields))

    async def announcement(self, org: Organization, title: str = "Welcome", **kwargs) -> Announcement:
        fields = dict(organization_id=org.id, title=title, body="See you on the sand.")
        fields.update(kwargs)
        return await self._save(Announcement(**fields))

    async def count(self, model, *where) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model).where(*where))
            return result.scalar_one()

    async def get(self, model, pk):
        async with self._session_factory() as session:
            return await session.get(model, pk)


@pytest.fixture
def factory(session_factory) -> Factory:
    return Factory(session_factory)


@pytest.fixture
def headers_for():
    """``headers_for(user)`` or ``headers_for("auth-id")`` -> Bearer headers."""

    def _headers(who) -> dict:
        if isinstance(who, User):
            return auth_headers(who.auth_user_id, who.email)
        return auth_headers(who)

    return _headers
