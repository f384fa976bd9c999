"""
Authentication endpoints.

- Hosted-provider callback: exchange the one-time code for a session
- Logout: revoke the session token and clear cookies
"""

from __future__ import annotations

import time
from typing import Optional

import jwt
import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    decode_session_token,
    find_profile,
    generate_csrf_token,
    read_session_token,
    revoke_session,
)
from app.core.auth_provider import AuthProviderError, exchange_code_for_session
from app.core.config import get_settings
from app.core.database import get_session

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()

DEFAULT_NEXT = "/dashboard"

# Cookie config
COOKIE_KWARGS = {
    "httponly": True,
    "secure": not settings.debug,  # allow non-HTTPS in dev
    "samesite": "lax",
    "path": "/",
    "max_age": settings.session_max_age_seconds,
}


def _set_session_cookies(response: Response, token: str, csrf: str) -> None:
    """Set the session token and CSRF cookies on a response."""
    response.set_cookie(key=settings.session_cookie_name, value=token, **COOKIE_KWARGS)
    response.set_cookie(
        key=settings.csrf_cookie_name,
        value=csrf,
        httponly=False,  # JS must read this
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=settings.session_max_age_seconds,
    )


def _clear_session_cookies(response: Response) -> None:
    response.delete_cookie(settings.session_cookie_name, path="/")
    response.delete_cookie(settings.csrf_cookie_name, path="/")


def safe_next(value: Optional[str]) -> str:
    """Only same-site absolute paths are honoured as post-login targets."""
    if not value or not value.startswith("/") or value.startswith("//"):
        return DEFAULT_NEXT
    return value


def _login_error(reason: str) -> RedirectResponse:
    return RedirectResponse(f"/login?error={reason}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/callback")
async def auth_callback(
    code: Optional[str] = None,
    next: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    """Provider redirect target. Starts the session and routes the user onward."""
    if not code:
        return _login_error("missing_code")

    try:
        token = await exchange_code_for_session(code)
    except AuthProviderError as exc:
        log.warning("auth.callback_failed", reason=str(exc))
        return _login_error("auth_failed")

    try:
        claims = decode_session_token(token)
    except jwt.PyJWTError as exc:
        log.warning("auth.callback_failed", reason=f"invalid token: {exc}")
        return _login_error("auth_failed")

    auth_user_id = claims.get("sub")
    if not auth_user_id:
        return _login_error("no_user")

    profile = await find_profile(auth_user_id, session)
    target = safe_next(next) if profile else "/onboarding"

    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    _set_session_cookies(response, token, generate_csrf_token())
    log.info("auth.login_success", auth_user_id=auth_user_id, onboarded=profile is not None)
    return response


@router.post("/logout")
async def logout(request: Request):
    """Invalidate the current session and send the browser to the login page."""
    token = read_session_token(request)
    if token:
        try:
            claims = decode_session_token(token)
        except jwt.PyJWTError:
            claims = {}  # Token already invalid, just clear cookies
        jti = claims.get("jti")
        if jti:
            # Only needs to outlive the token itself
            remaining = int(claims.get("exp", 0) - time.time())
            await revoke_session(jti, ttl_seconds=max(1, remaining))
            log.info("auth.logout", auth_user_id=claims.get("sub"))

    response = RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    _clear_session_cookies(response)
    return response
