"""Fanclub schema: users, fanclubs, memberships, posts.

Revision ID: 0001_fanclub_schema
Revises:
Create Date: 2026-10-18 11:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_fanclub_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users (owned by the identity subsystem)
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("nickname", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # fanclubs
    op.create_table(
        "fanclubs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("monthly_fee", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("purpose", sa.Text(), nullable=True),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("member_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("member_count >= 0", name="member_count_non_negative"),
        sa.CheckConstraint("monthly_fee >= 0", name="monthly_fee_non_negative"),
    )
    op.create_index("ix_fanclubs_owner_id", "fanclubs", ["owner_id"])
    op.create_index("ix_fanclubs_name", "fanclubs", ["name"])
    op.create_index("idx_fanclubs_created_at", "fanclubs", [sa.text("created_at DESC")])

    # memberships
    op.create_table(
        "memberships",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("fanclub_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("fanclubs.id"), nullable=False),
        sa.Column("is_owner", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("next_payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "fanclub_id", name="uq_memberships_user_fanclub"),
    )
    op.create_index("ix_memberships_user_id", "memberships", ["user_id"])
    op.create_index("ix_memberships_fanclub_id", "memberships", ["fanclub_id"])
    # At most one owner row per fanclub
    op.create_index(
        "uq_memberships_one_owner",
        "memberships",
        ["fanclub_id"],
        unique=True,
        postgresql_where=sa.text("is_owner"),
    )

    # posts
    op.create_table(
        "posts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("fanclub_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("fanclubs.id"), nullable=False),
        sa.Column("author_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("featured_image_url", sa.Text(), nullable=True),
        sa.Column("visibility", sa.Text(), nullable=False, server_default="public"),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("visibility IN ('public', 'members')", name="visibility_known"),
    )
    op.create_index("ix_posts_fanclub_id", "posts", ["fanclub_id"])
    op.create_index("ix_posts_author_id", "posts", ["author_id"])
    op.create_index("ix_posts_fanclub_published", "posts", ["fanclub_id", "published_at"])


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table("posts")
    op.drop_table("memberships")
    op.drop_table("fanclubs")
    op.drop_table("users")
