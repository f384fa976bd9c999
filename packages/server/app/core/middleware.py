"""
Security middleware: auth gate, CSRF protection, security headers.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from app.core.auth import has_valid_session
from app.core.config import get_settings

settings = get_settings()

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}

# ---------------------------------------------------------------------------
# Security Headers
# ---------------------------------------------------------------------------

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https:; "
        "connect-src 'self'; "
        "frame-ancestors 'none';"
    ),
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains; preload",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to every response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
        return response


# ---------------------------------------------------------------------------
# CSRF Protection (Double-Submit Cookie)
# ---------------------------------------------------------------------------

class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Double-submit cookie CSRF protection.

    Skipped for:
    - Safe HTTP methods (GET, HEAD, OPTIONS)
    - Requests with Authorization header (bearer tokens are not cookie-based)
    - Requests without a session cookie
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method in SAFE_METHODS:
            return await call_next(request)

        if request.headers.get("Authorization"):
            return await call_next(request)

        if settings.session_cookie_name not in request.cookies:
            return await call_next(request)

        cookie_token = request.cookies.get(settings.csrf_cookie_name)
        header_token = request.headers.get("X-CSRF-Token")

        if not cookie_token or not header_token or cookie_token != header_token:
            return JSONResponse(
                status_code=403,
                content={"error": "Invalid or missing CSRF token."},
            )

        return await call_next(request)


# ---------------------------------------------------------------------------
# Auth gate
# ---------------------------------------------------------------------------

PUBLIC_PREFIXES = ("/login", "/register", "/auth/", "/static/", "/api/")
PUBLIC_PATHS = {"/", "/health", "/ready", "/favicon.ico"}
APP_PREFIXES = ("/onboarding", "/dashboard", "/create-org", "/join", "/profile")
ORG_MEMBER_PATTERN = re.compile(r"^/[^/]+/(dashboard|admin)(/|$)")


def requires_session(path: str) -> bool:
    """True for the app paths and org member/admin paths that need a session.

    API paths are excluded; their handlers answer 401 themselves.
    """
    if path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES):
        return False
    if any(path == p or path.startswith(p + "/") for p in APP_PREFIXES):
        return True
    return bool(ORG_MEMBER_PATTERN.match(path))


class AuthGateMiddleware(BaseHTTPMiddleware):
    """Redirect unauthenticated browsers to the login page before routing."""

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if requires_session(path) and not has_valid_session(request):
            return RedirectResponse(f"/login?redirect={quote(path, safe='/')}")
        return await call_next(request)
