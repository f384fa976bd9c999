"""User profile and onboarding schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .common import Gender, SkillLevel

CURRENT_TOS_VERSION = "1.0"
CURRENT_PRIVACY_VERSION = "1.0"

MISSING_FIELDS = "Missing required fields"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_gender(value):
    if value is None:
        return value
    if not isinstance(value, str) or value not in {g.value for g in Gender}:
        raise ValueError("Invalid gender")
    return value


def _check_skill_level(value):
    if value is None:
        return value
    if not isinstance(value, str) or value not in {s.value for s in SkillLevel}:
        raise ValueError("Invalid skill level")
    return value


def _require_name(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValueError(MISSING_FIELDS)
    return value.strip()


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OnboardRequest(_CamelModel):
    """Profile details collected on first sign-in.

    Both legal confirmations must be the JSON literal ``true``; strings, numbers
    and ``false`` are rejected.
    """

    name: str
    gender: Gender
    skill_level: SkillLevel
    is_over_18: Optional[StrictBool] = Field(default=None, alias="isOver18")
    tos_accepted: Optional[StrictBool] = Field(default=None, alias="tosAccepted")

    normalize_name = field_validator("name")(_require_name)
    check_gender = field_validator("gender", mode="before")(_check_gender)
    check_skill_level = field_validator("skill_level", mode="before")(_check_skill_level)

    @model_validator(mode="after")
    def check_confirmations(self) -> "OnboardRequest":
        if self.is_over_18 is not True or self.tos_accepted is not True:
            raise ValueError(MISSING_FIELDS)
        return self


class ProfileUpdateRequest(_CamelModel):
    name: str
    gender: Gender
    skill_level: SkillLevel

    normalize_name = field_validator("name")(_require_name)
    check_gender = field_validator("gender", mode="before")(_check_gender)
    check_skill_level = field_validator("skill_level", mode="before")(_check_skill_level)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ProfileResponse(_CamelModel):
    name: str
    email: str
    avatar_url: Optional[str] = None
    gender: Gender
    skill_level: SkillLevel

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )
