"""User model. A row exists only once the person has finished onboarding."""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    auth_user_id: str = Field(unique=True, nullable=False, index=True)  # external auth subject
    email: str = Field(nullable=False, index=True)
    name: str = Field(nullable=False)
    avatar_url: Optional[str] = None
    gender: str = Field(nullable=False)  # MALE | FEMALE
    skill_level: str = Field(nullable=False)  # BEGINNER | INTERMEDIATE | ADVANCED | OPEN
    is_over_18: bool = Field(default=False, nullable=False)
    tos_accepted_at: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )
    tos_version: Optional[str] = None
    privacy_policy_accepted_at: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )
    privacy_policy_version: Optional[str] = None
