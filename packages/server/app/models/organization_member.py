"""Organization membership (join table with its own id for admin URLs)."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class OrganizationMember(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organization_members"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "organization_id", name="uq_member_user_org"),
    )

    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    role: str = Field(nullable=False, default="MEMBER")  # ADMIN | SCORER | MEMBER
