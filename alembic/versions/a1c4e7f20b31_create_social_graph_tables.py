"""create users, friendships, intro_requests and user_settings

Revision ID: a1c4e7f20b31
Revises:
Create Date: 2026-10-18 09:12:44.218305

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20b31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(120), nullable=False),
        sa.Column("photo_url", sa.String(500), nullable=True),
        sa.Column("location", sa.String(120), nullable=True),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("instagram_handle", sa.String(64), nullable=True),
        sa.Column("whatsapp_number", sa.String(32), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "friendships",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_low_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_high_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_low_id", "user_high_id", name="uq_friendships_pair"),
        sa.CheckConstraint("user_low_id <> user_high_id", name="ck_friendships_not_self"),
    )
    op.create_index("ix_friendships_user_low_id", "friendships", ["user_low_id"])
    op.create_index("ix_friendships_user_high_id", "friendships", ["user_high_id"])

    op.create_table(
        "intro_requests",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column(
            "from_user_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "to_user_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "via_user_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("connector_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("target_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("type IN ('friend','introduction')", name="ck_intro_requests_type"),
        sa.CheckConstraint("status IN ('pending','approved','declined')", name="ck_intro_requests_status"),
        sa.CheckConstraint(
            "connector_status IN ('pending','approved','declined','n/a')",
            name="ck_intro_requests_connector_status",
        ),
        sa.CheckConstraint(
            "target_status IN ('pending','approved','declined','n/a')",
            name="ck_intro_requests_target_status",
        ),
        sa.CheckConstraint("from_user_id <> to_user_id", name="ck_intro_requests_not_self"),
    )
    op.create_index("ix_intro_requests_from_user_id", "intro_requests", ["from_user_id"])
    op.create_index("ix_intro_requests_to_user_id", "intro_requests", ["to_user_id"])
    op.create_index("ix_intro_requests_via_user_id", "intro_requests", ["via_user_id"])
    op.create_index(
        "uq_intro_requests_pending_pair",
        "intro_requests",
        ["from_user_id", "to_user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "user_settings",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("notifications_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("email_updates_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("intro_requests_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_user_settings_user_id", "user_settings", ["user_id"], unique=True)


def downgrade():
    op.drop_index("ix_user_settings_user_id", table_name="user_settings")
    op.drop_table("user_settings")

    op.drop_index("uq_intro_requests_pending_pair", table_name="intro_requests")
    op.drop_index("ix_intro_requests_via_user_id", table_name="intro_requests")
    op.drop_index("ix_intro_requests_to_user_id", table_name="intro_requests")
    op.drop_index("ix_intro_requests_from_user_id", table_name="intro_requests")
    op.drop_table("intro_requests")

    op.drop_index("ix_friendships_user_high_id", table_name="friendships")
    op.drop_index("ix_friendships_user_low_id", table_name="friendships")
    op.drop_table("friendships")

    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
