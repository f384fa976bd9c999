"""Org announcement shown on the member dashboard."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin, _utcnow


class Announcement(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "announcements"

    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    author_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    title: str = Field(nullable=False)
    body: str = Field(nullable=False, sa_type=sa.Text)
    posted_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        index=True,
        sa_type=sa.DateTime(timezone=True),
    )
