"""init community schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUMS: dict[str, tuple[str, ...]] = {
    "post_visibility": ("public", "followers", "private"),
    "reaction_emoji": ("like", "love", "laugh", "wow", "sad", "angry"),
    "notification_type": ("like", "comment", "reaction"),
    "server_status": ("pending", "active", "suspended"),
    "listing_status": ("active", "sold", "hidden"),
    "ticket_type": ("feature_request", "marketplace_access", "other"),
    "ticket_status": ("open", "in_progress", "resolved", "closed"),
    "activity_action": (
        "post_edited",
        "post_deleted",
        "marketplace_listing_edited",
        "marketplace_listing_deleted",
        "marketplace_access_granted",
        "marketplace_access_revoked",
        "server_featured",
        "server_unfeatured",
        "server_status_changed",
        "ticket_responded",
        "user_banned",
        "user_unbanned",
    ),
    "activity_target": ("post", "marketplace_listing", "server_listing", "ticket", "user"),
}


def _enum(name: str) -> sa.Enum:
    return sa.Enum(*ENUMS[name], name=name, create_type=False)


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False)


def _fk(name: str, table: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(f"{table}.id", ondelete="CASCADE"),
        nullable=False,
    )


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _tags() -> sa.Column:
    return sa.Column(
        "tags",
        postgresql.ARRAY(sa.String(length=50)),
        nullable=False,
        server_default=sa.text("'{}'"),
    )


def _index(table: str, *columns: str) -> None:
    op.create_index(f"ix_{table}_{'_'.join(columns)}", table, list(columns), unique=False)


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("username", sa.String(length=30), nullable=False),
        sa.Column("avatar_url", sa.String(length=1024), nullable=True),
        sa.Column("banner_url", sa.String(length=1024), nullable=True),
        sa.Column("bio", sa.String(length=500), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "has_marketplace_access",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("badges", sa.JSON(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "follows",
        _id(),
        _fk("follower_id", "users"),
        _fk("following_id", "users"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
    )
    _index("follows", "follower_id")
    _index("follows", "following_id")

    op.create_table(
        "posts",
        _id(),
        _fk("author_id", "users"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("media", sa.JSON(), nullable=True),
        _tags(),
        sa.Column(
            "visibility",
            _enum("post_visibility"),
            nullable=False,
            server_default=sa.text("'public'"),
        ),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("posts", "author_id")

    for table, constraint in (
        ("likes", "uq_like_post_user"),
        ("dislikes", "uq_dislike_post_user"),
    ):
        op.create_table(
            table,
            _id(),
            _fk("post_id", "posts"),
            _fk("user_id", "users"),
            _created_at(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("post_id", "user_id", name=constraint),
        )
        _index(table, "post_id")
        _index(table, "user_id")

    op.create_table(
        "reactions",
        _id(),
        _fk("post_id", "posts"),
        _fk("user_id", "users"),
        sa.Column("emoji", _enum("reaction_emoji"), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("post_id", "user_id", name="uq_reaction_post_user"),
    )
    _index("reactions", "post_id")
    _index("reactions", "user_id")

    op.create_table(
        "comments",
        _id(),
        _fk("post_id", "posts"),
        _fk("author_id", "users"),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("comments", "post_id")
    _index("comments", "author_id")

    op.create_table(
        "notifications",
        _id(),
        _fk("user_id", "users"),
        sa.Column("type", _enum("notification_type"), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("notifications", "user_id")

    op.create_table(
        "server_listings",
        _id(),
        _fk("owner_id", "users"),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("ip", sa.String(length=255), nullable=True),
        sa.Column("connect_url", sa.String(length=1024), nullable=True),
        sa.Column("logo_url", sa.String(length=1024), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("features", sa.JSON(), nullable=True),
        _tags(),
        sa.Column("trailer_url", sa.String(length=1024), nullable=True),
        sa.Column("screenshots", sa.JSON(), nullable=True),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "status",
            _enum("server_status"),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("server_listings", "owner_id")
    _index("server_listings", "status")

    op.create_table(
        "marketplace_listings",
        _id(),
        _fk("owner_id", "users"),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=60), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("media", sa.JSON(), nullable=True),
        _tags(),
        sa.Column("tebex_link", sa.String(length=1024), nullable=True),
        sa.Column(
            "status",
            _enum("listing_status"),
            nullable=False,
            server_default=sa.text("'active'"),
        ),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("marketplace_listings", "owner_id")
    _index("marketplace_listings", "category")
    _index("marketplace_listings", "status")

    op.create_table(
        "events",
        _id(),
        _fk("host_id", "users"),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("recurrence_rule", sa.String(length=255), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("events", "host_id")
    _index("events", "start_at")

    op.create_table(
        "event_attendees",
        _id(),
        _fk("event_id", "events"),
        _fk("user_id", "users"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_attendee"),
    )
    _index("event_attendees", "event_id")
    _index("event_attendees", "user_id")

    op.create_table(
        "tickets",
        _id(),
        _fk("user_id", "users"),
        sa.Column("type", _enum("ticket_type"), nullable=False),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "status",
            _enum("ticket_status"),
            nullable=False,
            server_default=sa.text("'open'"),
        ),
        sa.Column("responses", sa.JSON(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("tickets", "user_id")
    _index("tickets", "status")

    op.create_table(
        "activity_logs",
        _id(),
        _fk("user_id", "users"),
        sa.Column("action", _enum("activity_action"), nullable=False),
        sa.Column("target_type", _enum("activity_target"), nullable=False),
        sa.Column("target_id", sa.String(length=64), nullable=False),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("activity_logs", "user_id")
    _index("activity_logs", "action")


def downgrade() -> None:
    for table in (
        "activity_logs",
        "tickets",
        "event_attendees",
        "events",
        "marketplace_listings",
        "server_listings",
        "notifications",
        "comments",
        "reactions",
        "dislikes",
        "likes",
        "posts",
        "follows",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name in reversed(ENUMS):
        sa.Enum(name=name).drop(bind, checkfirst=True)
