"""Fanclub model."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .base import TimestampMixin, UUIDMixin
from .user import User


class Fanclub(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "fanclubs"
    __table_args__ = (
        sa.CheckConstraint("member_count >= 0", name="member_count_non_negative"),
        sa.CheckConstraint("monthly_fee >= 0", name="monthly_fee_non_negative"),
    )

    name: str = Field(nullable=False, index=True)
    description: Optional[str] = None
    monthly_fee: int = Field(default=0, nullable=False)
    purpose: Optional[str] = None
    cover_image_url: Optional[str] = None
    owner_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    # Materialized count of memberships rows; only the membership ledger writes it.
    member_count: int = Field(default=0, nullable=False)

    # Listings show the owner's display name; loaded with every fanclub query.
    owner: Optional[User] = Relationship(
        sa_relationship_kwargs={"lazy": "joined", "innerjoin": True}
    )

    @property
    def owner_name(self) -> Optional[str]:
        if "owner" in sa.inspect(self).unloaded or self.owner is None:
            return None
        return self.owner.nickname
