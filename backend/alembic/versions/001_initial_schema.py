"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Creates all nine tables: users, families, family_members, events,
       media, comments, event_contributors, notifications, event_privacy.
How:   PostgreSQL types: UUID keys, TIMESTAMP WITH TIME ZONE, JSONB. Every
       child table references its parent with ON DELETE CASCADE, so deleting
       a family or an event removes everything under it in the database.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UUID = postgresql.UUID(as_uuid=True)
JSONB = postgresql.JSONB()


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID, nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        _timestamp("email_verified", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "families",
        sa.Column("id", UUID, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by_id", UUID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "settings",
            JSONB,
            nullable=False,
            server_default=sa.text(
                """'{"is_public": false, "allow_join_requests": true, "max_members": null}'::jsonb"""
            ),
            comment="is_public, allow_join_requests, max_members",
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "family_members",
        sa.Column("id", UUID, nullable=False),
        sa.Column(
            "family_id", UUID, sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("user_id", UUID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'member'"),
            comment="admin | member",
        ),
        _timestamp("joined_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("family_id", "user_id", name="uq_family_members_family_user"),
    )
    op.create_index("idx_family_members_user_id", "family_members", ["user_id"])

    op.create_table(
        "events",
        sa.Column("id", UUID, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column(
            "family_id", UUID, sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("created_by_id", UUID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_type", sa.String(20), nullable=False, server_default=sa.text("'other'")),
        sa.Column("tags", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_events_family_id", "events", ["family_id"])
    op.create_index("idx_events_created_at", "events", [sa.text("created_at DESC")])

    op.create_table(
        "media",
        sa.Column("id", UUID, nullable=False),
        sa.Column("event_id", UUID, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("uploaded_by_id", UUID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False, comment="Bytes"),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column(
            "storage_path",
            sa.String(500),
            nullable=True,
            comment="Relative path under STORAGE_ROOT, uploads only",
        ),
        sa.Column("alt_text", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("size > 0", name="ck_media_size_positive"),
    )
    op.create_index("idx_media_event_id", "media", ["event_id"])
    op.create_index("idx_media_storage_path", "media", ["storage_path"])

    op.create_table(
        "comments",
        sa.Column("id", UUID, nullable=False),
        sa.Column("event_id", UUID, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", UUID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "parent_id", UUID, sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True
        ),
        sa.Column("is_edited", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_comments_event_id", "comments", ["event_id"])

    op.create_table(
        "event_contributors",
        sa.Column("id", UUID, nullable=False),
        sa.Column("event_id", UUID, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'editor'")),
        sa.Column("added_by_id", UUID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("can_edit", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_delete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_invite", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_contributors_event_user"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", UUID, nullable=False),
        sa.Column("user_id", UUID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("reference_id", UUID, nullable=True),
        sa.Column("reference_type", sa.String(50), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notifications_user_created",
        "notifications",
        ["user_id", sa.text("created_at DESC")],
    )

    op.create_table(
        "event_privacy",
        sa.Column("id", UUID, nullable=False),
        sa.Column("event_id", UUID, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("can_view", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_edit", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_comment", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_upload_media", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_privacy_event_user"),
    )


def downgrade() -> None:
    """Drops every table, children first. All data is lost."""
    op.drop_table("event_privacy")
    op.drop_index("idx_notifications_user_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("event_contributors")
    op.drop_index("idx_comments_event_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_media_storage_path", table_name="media")
    op.drop_index("idx_media_event_id", table_name="media")
    op.drop_table("media")
    op.drop_index("idx_events_created_at", table_name="events")
    op.drop_index("idx_events_family_id", table_name="events")
    op.drop_table("events")
    op.drop_index("idx_family_members_user_id", table_name="family_members")
    op.drop_table("family_members")
    op.drop_table("families")
    op.drop_table("users")
