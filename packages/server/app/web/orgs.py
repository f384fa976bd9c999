"""
Org pages: the public page, join instructions, member dashboard and admin area.

Registered last so the ``/{orgSlug}`` catch-all never shadows top-level routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import OrgContext, resolve_org
from app.core.database import get_session
from app.core.templates import templates
from app.services import events as event_service
from app.web.deps import page_admin, page_member, page_staff
from beachvb_shared.schemas.common import OrgRole, STAFF_ROLES

router = APIRouter(include_in_schema=False)


def _admin_context(ctx: OrgContext) -> dict:
    return {
        "org": ctx.org,
        "user": ctx.user,
        "role": ctx.role,
        "is_admin": ctx.role == OrgRole.ADMIN,
    }


@router.get("/{orgSlug}")
async def org_public(
    request: Request,
    orgSlug: str,
    session: AsyncSession = Depends(get_session),
):
    """Public landing page for an org. No session required."""
    org = await resolve_org(orgSlug, session)
    events = await event_service.list_public_events(org.id, session)
    member_count = await event_service.count_members(org.id, session)
    return templates.TemplateResponse(
        request,
        "org_public.html",
        {"org": org, "events": events, "member_count": member_count},
    )


@router.get("/{orgSlug}/join")
async def org_join(
    request: Request,
    orgSlug: str,
    session: AsyncSession = Depends(get_session),
):
    org = await resolve_org(orgSlug, session)
    return templates.TemplateResponse(request, "org_join.html", {"org": org})


@router.get("/{orgSlug}/dashboard")
async def member_dashboard(
    request: Request,
    ctx: OrgContext = Depends(page_member),
    session: AsyncSession = Depends(get_session),
):
    events = await event_service.list_member_events(ctx.org_id, session)
    announcements = await event_service.list_announcements(ctx.org_id, session)
    return templates.TemplateResponse(
        request,
        "member_dashboard.html",
        {
            "org": ctx.org,
            "user": ctx.user,
            "role": ctx.role,
            "show_admin": ctx.has_role(STAFF_ROLES),
            "events": events,
            "announcements": announcements,
        },
    )


@router.get("/{orgSlug}/admin")
async def admin_overview(
    request: Request,
    ctx: OrgContext = Depends(page_staff),
    session: AsyncSession = Depends(get_session),
):
    context = _admin_context(ctx)
    context.update(
        member_count=await event_service.count_members(ctx.org_id, session),
        event_count=await event_service.count_events(ctx.org_id, session),
        recent_events=await event_service.list_recent_events(ctx.org_id, session),
    )
    return templates.TemplateResponse(request, "admin_overview.html", context)


@router.get("/{orgSlug}/admin/members")
async def admin_members(request: Request, ctx: OrgContext = Depends(page_staff)):
    """Member table; rows are loaded from and edited through the members API."""
    return templates.TemplateResponse(request, "admin_members.html", _admin_context(ctx))


@router.get("/{orgSlug}/admin/settings")
async def admin_settings(request: Request, ctx: OrgContext = Depends(page_admin)):
    return templates.TemplateResponse(request, "admin_settings.html", _admin_context(ctx))
