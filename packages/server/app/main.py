"""
Beach VB League Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import router as api_router
from app.api.auth import router as auth_router
from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import register_error_handlers
from app.core.logging import configure_logging
from app.core.middleware import (
    AuthGateMiddleware,
    CSRFMiddleware,
    SecurityHeadersMiddleware,
)
from app.core.redis import close_redis, get_redis
from app.core.templates import TEMPLATES_DIR
from app.web import orgs as org_pages
from app.web import pages as app_pages

settings = get_settings()
log = structlog.get_logger()

STATIC_DIR = TEMPLATES_DIR.parent / "static"


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Beach VB League",
        description="Multi-tenant league management for beach volleyball organizations.",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    # Middleware (order matters: last added is outermost)
    app.add_middleware(AuthGateMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )

    register_error_handlers(app)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check(session: AsyncSession = Depends(get_session)):
        """Readiness check: database and Redis must both answer."""
        try:
            await session.execute(text("SELECT 1"))
            redis = await get_redis()
            await redis.ping()
        except Exception as exc:
            log.warning("readiness.failed", error=str(exc))
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    # Auth routes (provider callback, logout)
    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    # JSON API
    app.include_router(api_router, prefix="/api")

    # Pages; org pages last, their /{orgSlug} path would shadow everything above
    app.include_router(app_pages.router)
    app.include_router(org_pages.router)

    @app.on_event("startup")
    async def on_startup():
        log.info("Beach VB League starting", debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Beach VB League shutting down")
        await close_redis()

    return app


app = create_app()
