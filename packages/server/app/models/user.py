"""User model (owned by the identity subsystem; the core reads ids only)."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    nickname: str = Field(nullable=False)
    email: str = Field(unique=True, nullable=False, index=True)
    phone: Optional[str] = None
    password_hash: Optional[str] = Field(default=None)  # opaque to the core
    avatar_url: Optional[str] = None
