"""
Member API endpoints.

GET    /api/org/{orgSlug}/members             — List members (Admin or Scorer)
PATCH  /api/org/{orgSlug}/members/{memberId}  — Change a member's role (Admin)
DELETE /api/org/{orgSlug}/members/{memberId}  — Remove a member (Admin)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import OrgContext, require_admin, require_admin_or_scorer
from app.core.database import get_session
from app.services import members as member_service
from beachvb_shared.schemas.common import OkResponse
from beachvb_shared.schemas.organizations import (
    MemberResponse,
    MemberRoleUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=list[MemberResponse])
async def list_members(
    ctx: OrgContext = Depends(require_admin_or_scorer),
    session: AsyncSession = Depends(get_session),
):
    """Members with a user summary, in join order."""
    rows = await member_service.list_members(ctx.org_id, session)
    return [MemberResponse.model_validate(row) for row in rows]


@router.patch("/{memberId}", response_model=OkResponse)
async def update_member_role(
    memberId: str,
    body: MemberRoleUpdateRequest,
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    await member_service.change_role(ctx, memberId, body.role, session)
    return OkResponse()


@router.delete("/{memberId}", response_model=OkResponse)
async def remove_member(
    memberId: str,
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    await member_service.remove_member(ctx, memberId, session)
    return OkResponse()
