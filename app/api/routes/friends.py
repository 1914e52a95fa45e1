from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.api.http_errors import request_error, value_error
from app.api.presenters.users import friend_map_response, friend_of_friend_item, user_summary
from app.schemas.friends import FriendListItem, FriendMapResponse, FriendOfFriendItem, UnfriendResponse
from app.services.friends import list_friends, remove_friend_edge
from app.services.graph import build_friend_map, compute_friends_of_friends

router = APIRouter(prefix="/friends", tags=["friends"])


@router.get("", response_model=list[FriendListItem])
async def get_friends(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    friends = await list_friends(db, user_id)
    return [FriendListItem(**user_summary(f).model_dump()) for f in friends]


@router.get("/fof", response_model=list[FriendOfFriendItem])
async def get_friends_of_friends(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        entries = await compute_friends_of_friends(db, user_id)
    except ValueError as e:
        raise request_error(e) from e
    return [friend_of_friend_item(e) for e in entries]


@router.get("/map", response_model=FriendMapResponse)
async def get_friend_map(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        friend_map = await build_friend_map(db, user_id)
    except ValueError as e:
        raise request_error(e) from e
    return friend_map_response(friend_map)


@router.delete("/{friend_id}", response_model=UnfriendResponse, status_code=200)
async def unfriend_route(
    friend_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        removed = await remove_friend_edge(db, user_id, friend_id)
        await db.commit()
        return UnfriendResponse(ok=True, removed=removed)
    except ValueError as e:
        await db.rollback()
        raise value_error(
            e,
            code_statuses={
                "invalid_participants": 400,
                "user_not_found": 404,
            },
            detail_overrides={
                "invalid_participants": "You cannot unfriend yourself",
                "user_not_found": "User not found",
            },
            default_detail="Could not unfriend user",
        ) from e
