"""
Organization-related Pydantic schemas.

Covers: org creation/join requests, settings read/update, member listing and
role changes, and the per-user org list.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .common import OrgRole, SkillLevel

SLUG_PATTERN = re.compile(r"^[a-z0-9-]{2,50}$")

# Slugs that would shadow top-level application routes
RESERVED_SLUGS = frozenset(
    {
        "api",
        "auth",
        "login",
        "register",
        "logout",
        "dashboard",
        "onboarding",
        "create-org",
        "join",
        "profile",
        "static",
        "health",
        "ready",
    }
)

JOIN_CODE_LENGTH = 8


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(_CamelModel):
    """Fields are optional at the schema level so the handler can answer with
    the same messages for every kind of missing input."""

    name: Optional[str] = None
    slug: Optional[str] = None
    timezone: Optional[str] = None


class OrgJoinRequest(_CamelModel):
    code: Optional[str] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip().upper() or None


class OrgSettingsUpdateRequest(_CamelModel):
    name: Optional[str] = None
    timezone: Optional[str] = None
    paypal_email: Optional[EmailStr] = None
    website: Optional[str] = Field(default=None, max_length=500)
    instagram_url: Optional[str] = Field(default=None, max_length=500)
    facebook_url: Optional[str] = Field(default=None, max_length=500)

    blank_optionals = field_validator(
        "paypal_email", "website", "instagram_url", "facebook_url", mode="before"
    )(_blank_to_none)


class MemberRoleUpdateRequest(_CamelModel):
    role: Optional[str] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgSlugResponse(_CamelModel):
    slug: str


class OrgSettingsResponse(_CamelModel):
    name: str
    slug: str
    timezone: str
    paypal_email: Optional[str] = None
    website: Optional[str] = None
    instagram_url: Optional[str] = None
    facebook_url: Optional[str] = None
    join_code: str

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class JoinCodeResponse(_CamelModel):
    join_code: str


class OrgListItem(_CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    role: OrgRole  # the requesting user's role in this org


class OrgListResponse(BaseModel):
    data: list[OrgListItem]


class MemberUser(_CamelModel):
    id: uuid.UUID
    name: str
    email: str
    avatar_url: Optional[str] = None
    skill_level: SkillLevel


class MemberResponse(_CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    organization_id: uuid.UUID
    role: OrgRole
    created_at: datetime
    user: MemberUser
