"""
Authentication and Authorization for Beach VB League.

Supports:
- Session tokens issued by the hosted auth provider (HS256 JWT, cookie or Bearer)
- Session revocation list in Redis (logout)
- Profile resolution (internal User row keyed by the external auth subject)
- Org-scoped role checks: member, admin-or-scorer, admin
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import get_session
from app.core.redis import get_redis
from app.models.organization import Organization
from app.models.organization_member import OrganizationMember
from app.models.user import User
from beachvb_shared.schemas.common import ADMIN_ROLES, STAFF_ROLES, OrgRole

log = structlog.get_logger()
settings = get_settings()

# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------

def create_session_token(
    auth_user_id: str,
    email: str,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed session token in the provider's format. Returns (token, jti).

    Production tokens are minted by the provider; this is used by the dev seed
    script and the test-suite.
    """
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(seconds=settings.session_max_age_seconds))
    payload = {
        "sub": auth_user_id,
        "email": email,
        "aud": settings.auth_jwt_audience,
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)
    return token, jti


def decode_session_token(token: str) -> dict:
    """Decode and verify a session token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.auth_jwt_algorithm],
        audience=settings.auth_jwt_audience,
    )


def read_session_token(request: Request) -> Optional[str]:
    """Bearer header first (scripts, tests), then the session cookie (browsers)."""
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(settings.session_cookie_name)


def has_valid_session(request: Request) -> bool:
    """Signature/expiry check only; used by the edge gate which does no I/O."""
    token = read_session_token(request)
    if not token:
        return False
    try:
        decode_session_token(token)
    except jwt.PyJWTError:
        return False
    return True


# ---------------------------------------------------------------------------
# Session revocation (Redis)
# ---------------------------------------------------------------------------

async def revoke_session(jti: str, ttl_seconds: int | None = None) -> None:
    """Add a session token ID to the revocation list in Redis."""
    redis = await get_redis()
    await redis.setex(
        f"session:revoked:{jti}", ttl_seconds or settings.session_max_age_seconds, "1"
    )


async def is_session_revoked(jti: str) -> bool:
    """Check if a session token ID has been revoked."""
    redis = await get_redis()
    return await redis.exists(f"session:revoked:{jti}") > 0


# ---------------------------------------------------------------------------
# CSRF Token
# ---------------------------------------------------------------------------

def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class AuthSession:
    """Identity asserted by the auth provider (no database lookup)."""

    def __init__(self, claims: dict):
        self.claims = claims
        self.auth_user_id: str = claims["sub"]
        self.email: str = claims.get("email") or ""
        self.jti: Optional[str] = claims.get("jti")


async def load_auth_session(request: Request) -> Optional[AuthSession]:
    """Return the caller's session, or None if absent, invalid or revoked."""
    token = read_session_token(request)
    if not token:
        return None
    try:
        claims = decode_session_token(token)
    except jwt.PyJWTError:
        return None
    if not claims.get("sub"):
        return None
    jti = claims.get("jti")
    if jti and await is_session_revoked(jti):
        return None
    return AuthSession(claims)


async def get_auth_session(request: Request) -> AuthSession:
    """Main authentication dependency: 401 unless a live session is present."""
    auth = await load_auth_session(request)
    if auth is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    request.state.auth = auth
    return auth


async def find_profile(auth_user_id: str, session: AsyncSession) -> Optional[User]:
    result = await session.execute(select(User).where(User.auth_user_id == auth_user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    auth: AuthSession = Depends(get_auth_session),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Resolve the caller's profile; 403 until onboarding is complete."""
    user = await find_profile(auth.auth_user_id, session)
    if not user:
        raise HTTPException(status_code=403, detail="Profile not complete")
    return user


# ---------------------------------------------------------------------------
# Org-scoped authorization
# ---------------------------------------------------------------------------

class OrgContext:
    """Container for an authenticated user + their membership in one org."""

    def __init__(
        self,
        user: User,
        org: Organization,
        membership: Optional[OrganizationMember],
    ):
        self.user = user
        self.org = org
        self.membership = membership
        self.user_id = user.id
        self.org_id = org.id
        self.role: Optional[OrgRole] = OrgRole(membership.role) if membership else None

    def has_role(self, allowed: Iterable[OrgRole]) -> bool:
        return self.role is not None and self.role in allowed


async def resolve_org(org_slug: str, session: AsyncSession) -> Organization:
    """Resolve a live (not soft-deleted) org by slug, raise 404 if not found."""
    org = await find_org(org_slug, session)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


async def find_org(org_slug: str, session: AsyncSession) -> Optional[Organization]:
    result = await session.execute(
        select(Organization).where(
            Organization.slug == org_slug,
            Organization.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def find_membership(
    user_id: uuid.UUID, org_id: uuid.UUID, session: AsyncSession
) -> Optional[OrganizationMember]:
    result = await session.execute(
        select(OrganizationMember).where(
            OrganizationMember.user_id == user_id,
            OrganizationMember.organization_id == org_id,
        )
    )
    return result.scalar_one_or_none()


async def get_org_context(
    orgSlug: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> OrgContext:
    """Resolve org + membership. Membership may be None; role checks decide."""
    org = await resolve_org(orgSlug, session)
    membership = await find_membership(user.id, org.id, session)
    return OrgContext(user=user, org=org, membership=membership)


async def require_admin_or_scorer(
    ctx: OrgContext = Depends(get_org_context),
) -> OrgContext:
    """Requires ADMIN or SCORER role."""
    if not ctx.has_role(STAFF_ROLES):
        log.info("auth.forbidden", org=ctx.org.slug, user_id=str(ctx.user_id), required="staff")
        raise HTTPException(status_code=403, detail="Forbidden")
    return ctx


async def require_admin(
    ctx: OrgContext = Depends(get_org_context),
) -> OrgContext:
    """Requires ADMIN role."""
    if not ctx.has_role(ADMIN_ROLES):
        log.info("auth.forbidden", org=ctx.org.slug, user_id=str(ctx.user_id), required="admin")
        raise HTTPException(status_code=403, detail="Forbidden")
    return ctx
