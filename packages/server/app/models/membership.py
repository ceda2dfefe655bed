"""User-Fanclub membership (join table with owner flag and renewal date)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class Membership(UUIDMixin, SQLModel, table=True):
    __tablename__ = "memberships"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "fanclub_id", name="uq_memberships_user_fanclub"),
        sa.Index(
            "uq_memberships_one_owner",
            "fanclub_id",
            unique=True,
            postgresql_where=sa.text("is_owner"),
            sqlite_where=sa.text("is_owner"),
        ),
    )

    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    fanclub_id: uuid.UUID = Field(foreign_key="fanclubs.id", nullable=False, index=True)
    is_owner: bool = Field(default=False, nullable=False)
    joined_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
        sa_type=sa.DateTime(timezone=True),
    )
    next_payment_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
