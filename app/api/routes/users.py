from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.api.presenters.users import user_profile, user_summary
from app.core.config import settings
from app.schemas.users import UserProfile, UserSummary
from app.services.users import get_user, search_users

router = APIRouter(prefix="/users", tags=["users"])


# Declared before /{user_id} so "search" is not parsed as an id.
@router.get("/search", response_model=list[UserSummary])
async def search_users_route(
    q: str = Query(default="", max_length=100),
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    users = await search_users(db, q, exclude_user_id=user_id, limit=settings.search_result_limit)
    return [user_summary(u) for u in users]


@router.get("/{user_id}", response_model=UserProfile)
async def get_user_route(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    _: UUID = Depends(get_current_user_id),
):
    try:
        user = await get_user(db, user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail="User not found") from e
    return user_profile(user)
