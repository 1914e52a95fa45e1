from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class IntroRequest(Base):
    __tablename__ = "intro_requests"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # friend|introduction

    from_user_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    to_user_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL for friend requests
    via_user_id: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    message: Mapped[str | None] = mapped_column(sa.Text, nullable=True)

    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="pending")
    connector_status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="pending")
    target_status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="pending")

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), default=_now_utc, server_default=sa.func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), default=_now_utc, server_default=sa.func.now(), nullable=False)

    __table_args__ = (
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
        # at most one live request per ordered pair
        sa.Index(
            "uq_intro_requests_pending_pair",
            "from_user_id",
            "to_user_id",
            unique=True,
            postgresql_where=sa.text("status = 'pending'"),
            sqlite_where=sa.text("status = 'pending'"),
        ),
    )
