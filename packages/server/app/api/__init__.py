"""
JSON API Router

User routes live under /user, org routes under /org and /org/{orgSlug}.
Every error body has the shape ``{"error": "<message>"}``.
"""

from fastapi import APIRouter

from beachvb_shared.schemas.common import ErrorResponse

from . import members, users
from .organizations import router_global as orgs_global_router
from .organizations import router_scoped as orgs_scoped_router

ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409)
}

router = APIRouter(responses=ERROR_RESPONSES)

router.include_router(users.router, prefix="/user", tags=["Users"])

# Organization routes (non-org-scoped: create, join)
router.include_router(orgs_global_router, prefix="/org", tags=["Organizations"])

# Organization routes (org-scoped: settings, join code, delete)
router.include_router(orgs_scoped_router, prefix="/org/{orgSlug}", tags=["Organizations"])

router.include_router(members.router, prefix="/org/{orgSlug}/members", tags=["Members"])
