"""
Membership service: listing, role changes and removal inside one org.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import OrgContext
from app.models.organization_member import OrganizationMember
from app.models.user import User
from beachvb_shared.schemas.common import OrgRole

log = structlog.get_logger()


async def list_members(
    org_id: uuid.UUID, session: AsyncSession
) -> list[dict]:
    """All memberships of an org with a user summary, oldest first."""
    result = await session.execute(
        select(OrganizationMember, User)
        .join(User, User.id == OrganizationMember.user_id)
        .where(OrganizationMember.organization_id == org_id)
        .order_by(OrganizationMember.created_at)
    )
    return [
        {
            "id": member.id,
            "user_id": member.user_id,
            "organization_id": member.organization_id,
            "role": member.role,
            "created_at": member.created_at,
            "user": {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "avatar_url": user.avatar_url,
                "skill_level": user.skill_level,
            },
        }
        for member, user in result.all()
    ]


def parse_role(value: object) -> OrgRole:
    try:
        return OrgRole(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid role")


async def get_member(
    org_id: uuid.UUID, member_id: str, session: AsyncSession
) -> OrganizationMember:
    """Look up a membership by id, scoped to the org; 404 otherwise."""
    try:
        mid = uuid.UUID(member_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Member not found")

    result = await session.execute(
        select(OrganizationMember).where(
            OrganizationMember.id == mid,
            OrganizationMember.organization_id == org_id,
        )
    )
    member = result.scalar_one_or_none()
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


async def change_role(
    ctx: OrgContext,
    member_id: str,
    role: object,
    session: AsyncSession,
) -> OrganizationMember:
    """Set a member's role. Admins cannot move themselves off ADMIN."""
    new_role = parse_role(role)
    member = await get_member(ctx.org_id, member_id, session)

    if member.user_id == ctx.user_id and new_role != OrgRole.ADMIN:
        raise HTTPException(status_code=400, detail="You cannot change your own role")

    member.role = new_role.value
    member.updated_at = datetime.now(timezone.utc)
    session.add(member)
    await session.flush()

    log.info(
        "member.role_changed",
        org_id=str(ctx.org_id),
        member_id=str(member.id),
        role=new_role.value,
        by=str(ctx.user_id),
    )
    return member


async def remove_member(
    ctx: OrgContext,
    member_id: str,
    session: AsyncSession,
) -> None:
    """Delete a membership. Admins cannot remove themselves."""
    member = await get_member(ctx.org_id, member_id, session)

    if member.user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="You cannot remove yourself")

    await session.delete(member)
    await session.flush()
    log.info(
        "member.removed",
        org_id=str(ctx.org_id),
        member_id=str(member.id),
        by=str(ctx.user_id),
    )
