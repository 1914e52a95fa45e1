from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.users import UserSummary


class FriendListItem(UserSummary):
    pass


class UnfriendResponse(BaseModel):
    ok: bool
    removed: bool


class MutualConnector(BaseModel):
    id: UUID
    display_name: str
    photo_url: str | None = None


class FriendOfFriendItem(BaseModel):
    user: UserSummary
    mutual_connectors: list[MutualConnector] = Field(default_factory=list)


class FriendMapResponse(BaseModel):
    me: UserSummary
    friends: list[UserSummary]
    friends_of_friends: list[FriendOfFriendItem]
