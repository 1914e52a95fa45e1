from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user_settings import UserSettings

SETTINGS_FIELDS = ("notifications_enabled", "email_updates_enabled", "intro_requests_enabled")


async def get_or_create_settings(db: AsyncSession, user_id: UUID) -> UserSettings:
    row = (
        await db.execute(sa.select(UserSettings).where(UserSettings.user_id == user_id))
    ).scalar_one_or_none()
    if row is not None:
        return row

    row = UserSettings(
        user_id=user_id,
        notifications_enabled=True,
        email_updates_enabled=False,
        intro_requests_enabled=True,
    )
    db.add(row)
    await db.flush()
    return row


async def update_settings(db: AsyncSession, user_id: UUID, updates: dict) -> UserSettings:
    row = await get_or_create_settings(db, user_id)
    for field in SETTINGS_FIELDS:
        value = updates.get(field)
        if value is not None:
            setattr(row, field, bool(value))
    await db.flush()
    return row


async def accepts_introductions(db: AsyncSession, user_id: UUID) -> bool:
    # users without a settings row get the defaults
    enabled = (
        await db.execute(
            sa.select(UserSettings.intro_requests_enabled).where(UserSettings.user_id == user_id)
        )
    ).scalar_one_or_none()
    return enabled is not False
