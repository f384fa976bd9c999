"""
Top-level pages: landing, sign-in, onboarding and the signed-in app shell.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import safe_next
from app.core.auth import AuthSession, find_profile
from app.core.auth_provider import authorize_url
from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import PageRedirect
from app.core.templates import templates
from app.models.user import User
from app.services import users as user_service
from app.web.deps import page_auth, page_user
from beachvb_shared.schemas.common import Gender, SkillLevel

settings = get_settings()
router = APIRouter(include_in_schema=False)

LOGIN_ERRORS = {
    "missing_code": "The sign-in link was incomplete. Please try again.",
    "auth_failed": "We couldn't sign you in. Please try again.",
    "no_user": "No account was returned by the sign-in provider.",
}


def _callback_url(redirect: Optional[str]) -> str:
    query = urlencode({"next": safe_next(redirect)})
    return f"{settings.public_base_url.rstrip('/')}/auth/callback?{query}"


@router.get("/")
async def landing(request: Request):
    return templates.TemplateResponse(request, "landing.html", {})


@router.get("/login")
async def login(
    request: Request,
    redirect: Optional[str] = None,
    error: Optional[str] = None,
):
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "provider_url": authorize_url(_callback_url(redirect)),
            "register_url": f"/register?{urlencode({'redirect': safe_next(redirect)})}",
            "error": LOGIN_ERRORS.get(error) if error else None,
        },
    )


@router.get("/register")
async def register(request: Request, redirect: Optional[str] = None):
    return templates.TemplateResponse(
        request,
        "register.html",
        {
            "provider_url": authorize_url(_callback_url(redirect), signup=True),
            "login_url": f"/login?{urlencode({'redirect': safe_next(redirect)})}",
        },
    )


@router.get("/onboarding")
async def onboarding(
    request: Request,
    auth: AuthSession = Depends(page_auth),
    session: AsyncSession = Depends(get_session),
):
    if await find_profile(auth.auth_user_id, session):
        raise PageRedirect("/dashboard")
    return templates.TemplateResponse(
        request,
        "onboarding.html",
        {"email": auth.email, "genders": list(Gender), "skill_levels": list(SkillLevel)},
    )


@router.get("/dashboard")
async def dashboard(
    request: Request,
    user: User = Depends(page_user),
    session: AsyncSession = Depends(get_session),
):
    """The caller's orgs, oldest membership first."""
    orgs = await user_service.list_user_orgs(user.id, session)
    return templates.TemplateResponse(
        request, "dashboard.html", {"user": user, "orgs": orgs}
    )


@router.get("/create-org")
async def create_org(request: Request, user: User = Depends(page_user)):
    return templates.TemplateResponse(request, "create_org.html", {"user": user})


@router.get("/join")
async def join(
    request: Request,
    code: Optional[str] = None,
    user: User = Depends(page_user),
):
    return templates.TemplateResponse(
        request,
        "join.html",
        {"user": user, "code": (code or "").strip().upper()},
    )


@router.get("/profile")
async def profile(request: Request, user: User = Depends(page_user)):
    return templates.TemplateResponse(
        request,
        "profile.html",
        {"user": user, "genders": list(Gender), "skill_levels": list(SkillLevel)},
    )
