"""Post model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .base import TimestampMixin, UUIDMixin, utcnow
from .user import User


class Post(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "posts"
    __table_args__ = (
        sa.CheckConstraint("visibility IN ('public', 'members')", name="visibility_known"),
        sa.Index("ix_posts_fanclub_published", "fanclub_id", "published_at"),
    )

    fanclub_id: uuid.UUID = Field(foreign_key="fanclubs.id", nullable=False, index=True)
    author_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    content: str = Field(nullable=False)
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    visibility: str = Field(default="public", nullable=False)  # public | members
    # Maintained by the likes/comments subsystem, not by this core.
    like_count: int = Field(default=0, nullable=False)
    comment_count: int = Field(default=0, nullable=False)
    published_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
        sa_type=sa.DateTime(timezone=True),
    )

    author: Optional[User] = Relationship(
        sa_relationship_kwargs={"lazy": "joined", "innerjoin": True}
    )

    @property
    def author_name(self) -> Optional[str]:
        if "author" in sa.inspect(self).unloaded or self.author is None:
            return None
        return self.author.nickname

    @property
    def author_avatar(self) -> Optional[str]:
        if "author" in sa.inspect(self).unloaded or self.author is None:
            return None
        return self.author.avatar_url
