"""
User API endpoints.

POST   /api/user/onboard   — Create the caller's profile (idempotent)
GET    /api/user/profile   — Read the caller's profile
PATCH  /api/user/profile   — Update name, gender, skill level
GET    /api/user/orgs      — Orgs the caller belongs to, with role
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthSession, get_auth_session, get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import users as user_service
from beachvb_shared.schemas.common import OkResponse
from beachvb_shared.schemas.organizations import OrgListItem, OrgListResponse
from beachvb_shared.schemas.users import (
    OnboardRequest,
    ProfileResponse,
    ProfileUpdateRequest,
)

router = APIRouter()


@router.post("/onboard", response_model=OkResponse)
async def onboard(
    body: OnboardRequest,
    auth: AuthSession = Depends(get_auth_session),
    session: AsyncSession = Depends(get_session),
):
    """Create the profile row. Both legal confirmations must be ``true``."""
    await user_service.onboard_user(auth, body, session)
    return OkResponse()


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    auth: AuthSession = Depends(get_auth_session),
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.get_profile(auth, session)
    return ProfileResponse.model_validate(user)


@router.patch("/profile", response_model=OkResponse)
async def update_profile(
    body: ProfileUpdateRequest,
    auth: AuthSession = Depends(get_auth_session),
    session: AsyncSession = Depends(get_session),
):
    await user_service.update_profile(auth, body, session)
    return OkResponse()


@router.get("/orgs", response_model=OrgListResponse)
async def list_orgs(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """List orgs the caller belongs to."""
    items = await user_service.list_user_orgs(user.id, session)
    return OrgListResponse(data=[OrgListItem(**item) for item in items])
