"""League/tournament event, surfaced read-only on org pages."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Event(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "events"

    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    name: str = Field(nullable=False)
    type: str = Field(nullable=False, default="LEAGUE")  # LEAGUE | TOURNAMENT
    status: str = Field(nullable=False, default="DRAFT", index=True)
    visibility: str = Field(nullable=False, default="PUBLIC")  # PUBLIC | PRIVATE
    start_date: Optional[date] = None
    tournament_start_date: Optional[date] = None
    registration_fee: Optional[Decimal] = Field(
        default=None, max_digits=10, decimal_places=2
    )
    deleted_at: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )
