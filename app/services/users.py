from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.friendship import Friendship
from app.models.intro_request import IntroRequest
from app.models.user import User
from app.models.user_settings import UserSettings

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "username",
    "display_name",
    "photo_url",
    "location",
    "about",
    "instagram_handle",
    "whatsapp_number",
    "phone_number",
)


async def get_user(db: AsyncSession, user_id: UUID) -> User:
    user = (await db.execute(sa.select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        raise ValueError("user_not_found")
    return user


async def get_users_by_ids(db: AsyncSession, user_ids) -> list[User]:
    ids = set(user_ids)
    if not ids:
        return []
    return list((await db.execute(sa.select(User).where(User.id.in_(ids)))).scalars().all())


async def ensure_users_exist(db: AsyncSession, *user_ids: UUID) -> None:
    wanted = set(user_ids)
    found = set((await db.execute(sa.select(User.id).where(User.id.in_(wanted)))).scalars().all())
    if found != wanted:
        raise ValueError("user_not_found")


async def search_users(
    db: AsyncSession,
    query: str,
    *,
    exclude_user_id: UUID | None = None,
    limit: int = 20,
) -> list[User]:
    q = sa.select(User)
    term = (query or "").strip()
    if term:
        pattern = f"%{term}%"
        q = q.where(sa.or_(User.display_name.ilike(pattern), User.username.ilike(pattern)))
    if exclude_user_id is not None:
        q = q.where(User.id != exclude_user_id)
    q = q.order_by(User.display_name.asc(), User.username.asc()).limit(limit)
    return list((await db.execute(q)).scalars().all())


async def update_profile(db: AsyncSession, user_id: UUID, updates: dict) -> User:
    user = await get_user(db, user_id)

    username = updates.get("username")
    if username is not None and username != user.username:
        taken = (
            await db.execute(sa.select(User.id).where(User.username == username, User.id != user_id))
        ).scalar_one_or_none()
        if taken is not None:
            raise ValueError("username_taken")

    changed = False
    for field in PROFILE_FIELDS:
        if field not in updates:
            continue
        value = updates[field]
        # username and display_name are NOT NULL
        if value is None and field in {"username", "display_name"}:
            continue
        if getattr(user, field) != value:
            setattr(user, field, value)
            changed = True

    if changed:
        user.updated_at = datetime.now(timezone.utc)
        await db.flush()
    return user


async def delete_account(db: AsyncSession, user_id: UUID) -> None:
    user = await get_user(db, user_id)

    await db.execute(
        sa.delete(Friendship).where(
            sa.or_(Friendship.user_low_id == user_id, Friendship.user_high_id == user_id)
        )
    )
    await db.execute(
        sa.delete(IntroRequest).where(
            sa.or_(
                IntroRequest.from_user_id == user_id,
                IntroRequest.to_user_id == user_id,
                IntroRequest.via_user_id == user_id,
            )
        )
    )
    await db.execute(sa.delete(UserSettings).where(UserSettings.user_id == user_id))
    await db.delete(user)
    await db.flush()
    logger.info("account deleted user_id=%s", user_id)
