"""
Organization API endpoints.

POST   /api/org/create              — Create an org; the creator becomes ADMIN
POST   /api/org/join                — Join an org by join code
GET    /api/org/{orgSlug}/settings  — Read org settings (Admin)
PATCH  /api/org/{orgSlug}/settings  — Update org settings (Admin)
POST   /api/org/{orgSlug}/join-code — Regenerate the join code (Admin)
DELETE /api/org/{orgSlug}           — Soft-delete the org (Admin)
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import OrgContext, get_current_user, require_admin
from app.core.database import get_session
from app.models.user import User
from app.services import organizations as org_service
from beachvb_shared.schemas.common import OkResponse
from beachvb_shared.schemas.organizations import (
    JoinCodeResponse,
    OrgCreateRequest,
    OrgJoinRequest,
    OrgSettingsResponse,
    OrgSettingsUpdateRequest,
    OrgSlugResponse,
)

log = structlog.get_logger()

# ---------------------------------------------------------------------------
# Non-org-scoped routes (no orgSlug in path)
# ---------------------------------------------------------------------------
router_global = APIRouter()


@router_global.post("/create", response_model=OrgSlugResponse)
async def create_org(
    body: OrgCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Create a new organization. The creator becomes an administrator."""
    org = await org_service.create_org(body, user, session)
    return OrgSlugResponse(slug=org.slug)


@router_global.post("/join", response_model=OrgSlugResponse)
async def join_org(
    body: OrgJoinRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Join the org owning the code. Joining twice is a no-op."""
    org = await org_service.join_org(body, user, session)
    return OrgSlugResponse(slug=org.slug)


# ---------------------------------------------------------------------------
# Org-scoped routes (orgSlug in path)
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


@router_scoped.get("/settings", response_model=OrgSettingsResponse)
async def read_settings(ctx: OrgContext = Depends(require_admin)):
    return OrgSettingsResponse.model_validate(ctx.org)


@router_scoped.patch("/settings", response_model=OrgSettingsResponse)
async def update_settings(
    body: OrgSettingsUpdateRequest,
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Replace name, timezone and the contact/social links. Absent links are cleared."""
    org = await org_service.update_settings(ctx.org, body, session)
    return OrgSettingsResponse.model_validate(org)


@router_scoped.post("/join-code", response_model=JoinCodeResponse)
async def regenerate_join_code(
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    org = await org_service.regenerate_join_code(ctx.org, session)
    return JoinCodeResponse(join_code=org.join_code)


@router_scoped.delete("", response_model=OkResponse)
async def delete_org(
    ctx: OrgContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Soft-delete: the org disappears from every listing and page."""
    await org_service.soft_delete_org(ctx.org, session)
    return OkResponse()
