"""Organization model (tenant container, soft-deletable)."""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Organization(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    name: str = Field(nullable=False, index=True)
    slug: str = Field(unique=True, nullable=False, index=True, max_length=50)
    join_code: str = Field(unique=True, nullable=False, index=True, max_length=20)
    timezone: str = Field(nullable=False, default="America/New_York")
    paypal_email: Optional[str] = None
    website: Optional[str] = None
    instagram_url: Optional[str] = None
    facebook_url: Optional[str] = None
    deleted_at: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )
