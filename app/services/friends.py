from __future__ import annotations

import logging
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.models.friendship import Friendship
from app.models.user import User
from app.services.users import ensure_users_exist

logger = logging.getLogger(__name__)

# Dialects whose INSERT supports ON CONFLICT DO NOTHING
_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _pair(a: UUID, b: UUID) -> tuple[UUID, UUID]:
    return (a, b) if a < b else (b, a)


def _touching(user_ids) -> sa.ColumnElement[bool]:
    ids = list(user_ids)
    return sa.or_(Friendship.user_low_id.in_(ids), Friendship.user_high_id.in_(ids))


async def are_friends(db: AsyncSession, a: UUID, b: UUID) -> bool:
    if a == b:
        return False
    low, high = _pair(a, b)
    q = sa.select(sa.literal(True)).select_from(Friendship).where(
        Friendship.user_low_id == low,
        Friendship.user_high_id == high,
    )
    return (await db.execute(q)).scalar_one_or_none() is True


async def friend_ids(db: AsyncSession, user_id: UUID) -> set[UUID]:
    rows = (
        await db.execute(
            sa.select(Friendship.user_low_id, Friendship.user_high_id).where(_touching([user_id]))
        )
    ).all()
    return {high if low == user_id else low for low, high in rows}


async def adjacency_for(db: AsyncSession, user_ids) -> dict[UUID, set[UUID]]:
    """Neighbour sets for every id in ``user_ids``, fetched in one query."""
    ids = set(user_ids)
    adjacency: dict[UUID, set[UUID]] = {uid: set() for uid in ids}
    if not ids:
        return adjacency

    rows = (
        await db.execute(sa.select(Friendship.user_low_id, Friendship.user_high_id).where(_touching(ids)))
    ).all()
    for low, high in rows:
        if low in adjacency:
            adjacency[low].add(high)
        if high in adjacency:
            adjacency[high].add(low)
    return adjacency


async def add_friend_edge(db: AsyncSession, a: UUID, b: UUID) -> bool:
    """Connect two users. Returns True when a new edge was written."""
    if a == b:
        raise ValueError("invalid_participants")
    await ensure_users_exist(db, a, b)

    low, high = _pair(a, b)
    make_insert = _CONFLICT_INSERTS.get(db.get_bind().dialect.name)
    if make_insert is None:
        if await are_friends(db, a, b):
            return False
        db.add(Friendship(user_low_id=low, user_high_id=high))
        await db.flush()
        created = True
    else:
        stmt = (
            make_insert(Friendship.__table__)
            .values(user_low_id=low, user_high_id=high)
            .on_conflict_do_nothing(index_elements=["user_low_id", "user_high_id"])
        )
        created = (await db.execute(stmt)).rowcount > 0

    if created:
        logger.info("friend edge added low=%s high=%s", low, high)
    return created


async def remove_friend_edge(db: AsyncSession, a: UUID, b: UUID) -> bool:
    """Disconnect two users. Missing edges are a no-op; returns True when a row was removed."""
    if a == b:
        raise ValueError("invalid_participants")
    await ensure_users_exist(db, a, b)

    low, high = _pair(a, b)
    result = await db.execute(
        sa.delete(Friendship).where(
            Friendship.user_low_id == low,
            Friendship.user_high_id == high,
        )
    )
    removed = result.rowcount > 0
    if removed:
        logger.info("friend edge removed low=%s high=%s", low, high)
    return removed


async def list_friends(db: AsyncSession, current_user_id: UUID) -> list[User]:
    # friendship row can contain you in either low/high
    f = Friendship
    u = aliased(User)

    q = (
        sa.select(u)
        .join(
            f,
            ((f.user_low_id == current_user_id) & (u.id == f.user_high_id))
            | ((f.user_high_id == current_user_id) & (u.id == f.user_low_id)),
        )
        .order_by(u.display_name.asc(), u.username.asc())
    )

    return list((await db.execute(q)).scalars().all())
