"""
User service: onboarding, profile read/update, org listing.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import AuthSession, find_profile
from app.models.organization import Organization
from app.models.organization_member import OrganizationMember
from app.models.user import User
from beachvb_shared.schemas.users import (
    CURRENT_PRIVACY_VERSION,
    CURRENT_TOS_VERSION,
    OnboardRequest,
    ProfileUpdateRequest,
)

log = structlog.get_logger()


async def onboard_user(
    auth: AuthSession, req: OnboardRequest, session: AsyncSession
) -> User:
    """Create the caller's profile. Returns the existing row if already onboarded."""
    existing = await find_profile(auth.auth_user_id, session)
    if existing:
        return existing

    now = datetime.now(timezone.utc)
    user = User(
        auth_user_id=auth.auth_user_id,
        email=auth.email,
        name=req.name,
        gender=req.gender.value,
        skill_level=req.skill_level.value,
        is_over_18=True,
        tos_accepted_at=now,
        tos_version=CURRENT_TOS_VERSION,
        privacy_policy_accepted_at=now,
        privacy_policy_version=CURRENT_PRIVACY_VERSION,
    )
    try:
        async with session.begin_nested():
            session.add(user)
            await session.flush()
    except IntegrityError:
        # A concurrent onboard for the same account won the insert
        log.info("user.onboard_raced", auth_user_id=auth.auth_user_id)
        return await find_profile(auth.auth_user_id, session)

    log.info("user.onboarded", user_id=str(user.id), tos_version=CURRENT_TOS_VERSION)
    return user


async def get_profile(auth: AuthSession, session: AsyncSession) -> User:
    user = await find_profile(auth.auth_user_id, session)
    if not user:
        raise HTTPException(status_code=404, detail="Profile not found")
    return user


async def update_profile(
    auth: AuthSession, req: ProfileUpdateRequest, session: AsyncSession
) -> User:
    """Update name, gender and skill level."""
    user = await get_profile(auth, session)
    user.name = req.name
    user.gender = req.gender.value
    user.skill_level = req.skill_level.value
    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    await session.flush()

    log.info("user.profile_updated", user_id=str(user.id))
    return user


async def list_user_orgs(
    user_id: uuid.UUID, session: AsyncSession
) -> list[dict]:
    """List all live orgs a user belongs to, with their role, oldest membership first."""
    result = await session.execute(
        select(Organization, OrganizationMember.role)
        .join(OrganizationMember, OrganizationMember.organization_id == Organization.id)
        .where(OrganizationMember.user_id == user_id)
        .where(Organization.deleted_at.is_(None))
        .order_by(OrganizationMember.created_at)
    )
    rows = result.all()
    return [
        {
            "id": org.id,
            "name": org.name,
            "slug": org.slug,
            "role": role,
        }
        for org, role in rows
    ]
