"""
Organization service: business logic for org creation, joining and settings.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timezone

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import find_membership
from app.models.organization import Organization
from app.models.organization_member import OrganizationMember
from app.models.user import User
from beachvb_shared.schemas.common import OrgRole
from beachvb_shared.schemas.organizations import (
    JOIN_CODE_LENGTH,
    RESERVED_SLUGS,
    SLUG_PATTERN,
    OrgCreateRequest,
    OrgJoinRequest,
    OrgSettingsUpdateRequest,
)

log = structlog.get_logger()

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits
JOIN_CODE_ATTEMPTS = 10

SLUG_TAKEN = "That URL is already taken. Please choose another."


def generate_join_code(length: int = JOIN_CODE_LENGTH) -> str:
    """Random uppercase alphanumeric join code."""
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


async def _unused_join_code(session: AsyncSession) -> str:
    for _ in range(JOIN_CODE_ATTEMPTS):
        code = generate_join_code()
        result = await session.execute(
            select(Organization.id).where(Organization.join_code == code)
        )
        if result.scalar_one_or_none() is None:
            return code
    raise HTTPException(status_code=409, detail="Could not allocate a join code, try again")


async def slug_taken(slug: str, session: AsyncSession) -> bool:
    # Soft-deleted orgs keep their slug: the unique constraint covers every row.
    if slug in RESERVED_SLUGS:
        return True
    result = await session.execute(select(Organization.id).where(Organization.slug == slug))
    return result.scalar_one_or_none() is not None


async def create_org(
    req: OrgCreateRequest,
    creator: User,
    session: AsyncSession,
) -> Organization:
    """Create an org and make the creator an ADMIN."""
    name = (req.name or "").strip()
    slug = (req.slug or "").strip()
    tz = (req.timezone or "").strip()
    if not name or not slug or not tz:
        raise HTTPException(status_code=400, detail="Missing required fields")

    if not SLUG_PATTERN.match(slug):
        raise HTTPException(status_code=400, detail="Invalid slug format")

    if await slug_taken(slug, session):
        raise HTTPException(status_code=409, detail=SLUG_TAKEN)

    org = Organization(
        name=name,
        slug=slug,
        timezone=tz,
        join_code=await _unused_join_code(session),
    )
    session.add(org)
    try:
        await session.flush()
    except IntegrityError:
        # Lost a race with a concurrent create for the same slug
        raise HTTPException(status_code=409, detail=SLUG_TAKEN)

    membership = OrganizationMember(
        user_id=creator.id,
        organization_id=org.id,
        role=OrgRole.ADMIN.value,
    )
    session.add(membership)
    await session.flush()

    log.info("org.created", org_id=str(org.id), slug=slug, creator=str(creator.id))
    return org


async def join_org(
    req: OrgJoinRequest,
    user: User,
    session: AsyncSession,
) -> Organization:
    """Join the org matching the code as MEMBER. Re-joining is a no-op."""
    if not req.code:
        raise HTTPException(status_code=400, detail="Join code is required")

    result = await session.execute(
        select(Organization).where(
            Organization.join_code == req.code,
            Organization.deleted_at.is_(None),
        )
    )
    org = result.scalar_one_or_none()
    if not org:
        raise HTTPException(
            status_code=404,
            detail="Invalid join code. Please check with your admin.",
        )

    if await find_membership(user.id, org.id, session):
        return org

    membership = OrganizationMember(
        user_id=user.id,
        organization_id=org.id,
        role=OrgRole.MEMBER.value,
    )
    try:
        async with session.begin_nested():
            session.add(membership)
            await session.flush()
    except IntegrityError:
        # A concurrent join already created the row; same outcome
        log.info("org.join_raced", org_id=str(org.id), user_id=str(user.id))
        return org

    log.info("org.joined", org_id=str(org.id), user_id=str(user.id))
    return org


async def update_settings(
    org: Organization,
    req: OrgSettingsUpdateRequest,
    session: AsyncSession,
) -> Organization:
    """Replace name, timezone and the optional contact/social fields."""
    name = (req.name or "").strip()
    tz = (req.timezone or "").strip()
    if not name or not tz:
        raise HTTPException(status_code=400, detail="Name and timezone are required")

    org.name = name
    org.timezone = tz
    org.paypal_email = str(req.paypal_email) if req.paypal_email else None
    org.website = req.website
    org.instagram_url = req.instagram_url
    org.facebook_url = req.facebook_url
    org.updated_at = datetime.now(timezone.utc)
    session.add(org)
    await session.flush()

    log.info("org.settings_updated", org_id=str(org.id), slug=org.slug)
    return org


async def regenerate_join_code(
    org: Organization, session: AsyncSession
) -> Organization:
    """Issue a fresh join code; the previous one stops working immediately."""
    org.join_code = await _unused_join_code(session)
    org.updated_at = datetime.now(timezone.utc)
    session.add(org)
    await session.flush()

    log.info("org.join_code_rotated", org_id=str(org.id), slug=org.slug)
    return org


async def soft_delete_org(
    org: Organization, session: AsyncSession
) -> Organization:
    """Hide the org everywhere by stamping ``deleted_at``."""
    now = datetime.now(timezone.utc)
    org.deleted_at = now
    org.updated_at = now
    session.add(org)
    await session.flush()

    log.info("org.deleted", org_id=str(org.id), slug=org.slug)
    return org
