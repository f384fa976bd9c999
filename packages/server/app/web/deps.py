"""
Page dependencies.

Same checks as the API dependencies in ``app.core.auth``, but failures send the
browser somewhere useful instead of answering with a JSON error:

- no session           -> /login?redirect=<path>
- no profile           -> /onboarding
- unknown/deleted org  -> 404 page
- not a member         -> /{orgSlug}/join
- insufficient role    -> 403 page
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    AuthSession,
    OrgContext,
    find_membership,
    find_profile,
    load_auth_session,
    resolve_org,
)
from app.core.database import get_session
from app.core.errors import PageRedirect, login_redirect
from app.models.user import User
from beachvb_shared.schemas.common import ADMIN_ROLES, STAFF_ROLES

NO_ADMIN_ACCESS = "You don't have admin access to this organization."


async def page_auth(request: Request) -> AuthSession:
    auth = await load_auth_session(request)
    if auth is None:
        raise login_redirect(request.url.path)
    return auth


async def page_user(
    auth: AuthSession = Depends(page_auth),
    session: AsyncSession = Depends(get_session),
) -> User:
    user = await find_profile(auth.auth_user_id, session)
    if not user:
        raise PageRedirect("/onboarding")
    return user


async def page_org_context(
    orgSlug: str,
    user: User = Depends(page_user),
    session: AsyncSession = Depends(get_session),
) -> OrgContext:
    org = await resolve_org(orgSlug, session)
    membership = await find_membership(user.id, org.id, session)
    return OrgContext(user=user, org=org, membership=membership)


async def page_member(ctx: OrgContext = Depends(page_org_context)) -> OrgContext:
    if ctx.membership is None:
        raise PageRedirect(f"/{ctx.org.slug}/join")
    return ctx


async def page_staff(ctx: OrgContext = Depends(page_org_context)) -> OrgContext:
    """ADMIN or SCORER; everyone else, non-members included, gets the 403 page."""
    if not ctx.has_role(STAFF_ROLES):
        raise HTTPException(status_code=403, detail=NO_ADMIN_ACCESS)
    return ctx


async def page_admin(ctx: OrgContext = Depends(page_org_context)) -> OrgContext:
    if not ctx.has_role(ADMIN_ROLES):
        raise HTTPException(status_code=403, detail=NO_ADMIN_ACCESS)
    return ctx
