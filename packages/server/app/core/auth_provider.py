"""
Client for the hosted authentication provider.

Only the authorization-code exchange happens server-side; sign-in and sign-up
screens are hosted by the provider itself.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx
import structlog

from app.core.config import get_settings

log = structlog.get_logger()
settings = get_settings()


class AuthProviderError(Exception):
    """The provider rejected the exchange or could not be reached."""


def authorize_url(redirect_to: str, *, signup: bool = False) -> str:
    """URL of the provider's hosted sign-in (or sign-up) screen."""
    params = {"redirect_to": redirect_to}
    path = "signup" if signup else "authorize"
    return f"{settings.auth_provider_url.rstrip('/')}/{path}?{urlencode(params)}"


async def exchange_code_for_session(code: str) -> str:
    """Trade the callback code for a session token. Returns the access token."""
    url = f"{settings.auth_provider_url.rstrip('/')}/token"
    headers = {}
    if settings.auth_provider_api_key:
        headers["apikey"] = settings.auth_provider_api_key
    try:
        async with httpx.AsyncClient(timeout=settings.auth_request_timeout_seconds) as client:
            resp = await client.post(
                url,
                params={"grant_type": "pkce"},
                json={"auth_code": code},
                headers=headers,
            )
    except httpx.HTTPError as exc:
        log.warning("auth.provider_unreachable", error=str(exc))
        raise AuthProviderError("Auth provider unreachable") from exc

    if resp.status_code != 200:
        log.warning("auth.exchange_rejected", status=resp.status_code)
        raise AuthProviderError(f"Code exchange failed with status {resp.status_code}")

    token = resp.json().get("access_token")
    if not token:
        raise AuthProviderError("Code exchange returned no access token")
    return token
