"""
Error rendering.

API routes answer with ``{"error": "<message>"}``; page routes render the HTML
error template. Page handlers that need to send the browser elsewhere raise
``PageRedirect``.
"""

from __future__ import annotations

from urllib.parse import quote

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.templates import templates

log = structlog.get_logger()

API_PREFIX = "/api/"

_DEFAULT_MESSAGES = {
    status.HTTP_400_BAD_REQUEST: "Bad request",
    status.HTTP_401_UNAUTHORIZED: "Not authenticated",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "Not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
    status.HTTP_409_CONFLICT: "Conflict",
}


class PageRedirect(Exception):
    """Raised from page dependencies to short-circuit into a redirect."""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location


def login_redirect(path: str) -> PageRedirect:
    return PageRedirect(f"/login?redirect={quote(path, safe='/')}")


def is_api_request(request: Request) -> bool:
    return request.url.path.startswith(API_PREFIX)


def error_message(status_code: int, detail: object) -> str:
    if isinstance(detail, str) and detail:
        return detail
    return _DEFAULT_MESSAGES.get(status_code, "Request failed")


def validation_message(exc: RequestValidationError) -> str:
    """Collapse pydantic errors into the single message returned to clients."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "missing":
        return "Missing required fields"
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    msg = str(first.get("msg", "Invalid request"))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return msg


def error_page(request: Request, status_code: int, message: str) -> Response:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"status_code": status_code, "message": message},
        status_code=status_code,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        message = error_message(exc.status_code, exc.detail)
        if is_api_request(request):
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": message},
                headers=getattr(exc, "headers", None),
            )
        return error_page(request, exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        message = validation_message(exc)
        log.info("request.invalid", path=request.url.path, error=message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": message},
        )

    @app.exception_handler(PageRedirect)
    async def _redirect_handler(request: Request, exc: PageRedirect):
        return RedirectResponse(exc.location, status_code=status.HTTP_303_SEE_OTHER)
