from __future__ import annotations

from typing import Any

from app.schemas.friends import FriendMapResponse, FriendOfFriendItem, MutualConnector
from app.schemas.users import MeResponse, UserProfile, UserSummary
from app.services.graph import FriendMap, FriendOfFriend


def user_summary(user: Any) -> UserSummary:
    return UserSummary(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        photo_url=user.photo_url,
    )


def user_profile(user: Any) -> UserProfile:
    return UserProfile(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        photo_url=user.photo_url,
        location=user.location,
        about=user.about,
        instagram_handle=user.instagram_handle,
        whatsapp_number=user.whatsapp_number,
        phone_number=user.phone_number,
    )


def me_response(user: Any) -> MeResponse:
    return MeResponse(email=user.email, **user_profile(user).model_dump())


def friend_of_friend_item(entry: FriendOfFriend) -> FriendOfFriendItem:
    return FriendOfFriendItem(
        user=user_summary(entry.user),
        mutual_connectors=[
            MutualConnector(id=c.id, display_name=c.display_name, photo_url=c.photo_url)
            for c in entry.mutual_connectors
        ],
    )


def friend_map_response(friend_map: FriendMap) -> FriendMapResponse:
    return FriendMapResponse(
        me=user_summary(friend_map.me),
        friends=[user_summary(f) for f in friend_map.friends],
        friends_of_friends=[friend_of_friend_item(e) for e in friend_map.friends_of_friends],
    )
