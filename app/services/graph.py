from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.services.friends import adjacency_for, friend_ids
from app.services.users import get_user, get_users_by_ids


@dataclass
class FriendOfFriend:
    user: User
    mutual_connectors: list[User] = field(default_factory=list)


@dataclass
class FriendMap:
    me: User
    friends: list[User]
    friends_of_friends: list[FriendOfFriend]


def _by_name(user: User) -> tuple[str, str]:
    return (user.display_name.lower(), user.username.lower())


def derive_second_degree(
    user_id: UUID,
    direct: set[UUID],
    adjacency: dict[UUID, set[UUID]],
) -> dict[UUID, set[UUID]]:
    """Map each friend-of-friend id to the direct friends that connect to it.

    Self and direct friends are never candidates, however many paths reach them.
    """
    connectors: dict[UUID, set[UUID]] = {}
    for friend_id in direct:
        for candidate in adjacency.get(friend_id, ()):
            if candidate == user_id or candidate in direct:
                continue
            connectors.setdefault(candidate, set()).add(friend_id)
    return connectors


async def _second_degree(db: AsyncSession, user_id: UUID, direct: set[UUID]) -> tuple[list[FriendOfFriend], dict[UUID, User]]:
    if not direct:
        return [], {}

    adjacency = await adjacency_for(db, direct)
    connectors = derive_second_degree(user_id, direct, adjacency)
    users = {u.id: u for u in await get_users_by_ids(db, set(connectors) | direct)}

    out: list[FriendOfFriend] = []
    for candidate_id, via_ids in connectors.items():
        candidate = users.get(candidate_id)
        if candidate is None:
            continue
        mutual = sorted((users[v] for v in via_ids if v in users), key=_by_name)
        out.append(FriendOfFriend(user=candidate, mutual_connectors=mutual))
    out.sort(key=lambda entry: _by_name(entry.user))
    return out, users


async def compute_friends_of_friends(db: AsyncSession, user_id: UUID) -> list[FriendOfFriend]:
    await get_user(db, user_id)
    direct = await friend_ids(db, user_id)
    result, _ = await _second_degree(db, user_id, direct)
    return result


async def build_friend_map(db: AsyncSession, user_id: UUID) -> FriendMap:
    me = await get_user(db, user_id)
    direct = await friend_ids(db, user_id)
    fof, users = await _second_degree(db, user_id, direct)
    friends = sorted((users[f] for f in direct if f in users), key=_by_name)
    return FriendMap(me=me, friends=friends, friends_of_friends=fof)
