"""
Read-side queries for events and announcements shown on org pages.
"""

from __future__ import annotations

import uuid

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.announcement import Announcement
from app.models.event import Event
from app.models.organization_member import OrganizationMember
from beachvb_shared.schemas.common import EventStatus, EventVisibility

PAGE_EVENT_LIMIT = 20
DASHBOARD_ANNOUNCEMENT_LIMIT = 5
ADMIN_RECENT_EVENT_LIMIT = 5


async def list_public_events(
    org_id: uuid.UUID, session: AsyncSession, limit: int = PAGE_EVENT_LIMIT
) -> list[Event]:
    """Public, published (non-draft) events, newest first."""
    result = await session.execute(
        select(Event)
        .where(
            Event.organization_id == org_id,
            Event.visibility == EventVisibility.PUBLIC.value,
            Event.deleted_at.is_(None),
            Event.status != EventStatus.DRAFT.value,
        )
        .order_by(Event.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_member_events(
    org_id: uuid.UUID, session: AsyncSession, limit: int = PAGE_EVENT_LIMIT
) -> list[Event]:
    """Every published event regardless of visibility, newest first."""
    result = await session.execute(
        select(Event)
        .where(
            Event.organization_id == org_id,
            Event.deleted_at.is_(None),
            Event.status != EventStatus.DRAFT.value,
        )
        .order_by(Event.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_recent_events(
    org_id: uuid.UUID, session: AsyncSession, limit: int = ADMIN_RECENT_EVENT_LIMIT
) -> list[Event]:
    """Latest events including drafts, for the admin overview."""
    result = await session.execute(
        select(Event)
        .where(Event.organization_id == org_id, Event.deleted_at.is_(None))
        .order_by(Event.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_announcements(
    org_id: uuid.UUID,
    session: AsyncSession,
    limit: int = DASHBOARD_ANNOUNCEMENT_LIMIT,
) -> list[Announcement]:
    result = await session.execute(
        select(Announcement)
        .where(Announcement.organization_id == org_id)
        .order_by(Announcement.posted_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def count_members(org_id: uuid.UUID, session: AsyncSession) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(OrganizationMember)
        .where(OrganizationMember.organization_id == org_id)
    )
    return result.scalar_one()


async def count_events(org_id: uuid.UUID, session: AsyncSession) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(Event)
        .where(Event.organization_id == org_id, Event.deleted_at.is_(None))
    )
    return result.scalar_one()
