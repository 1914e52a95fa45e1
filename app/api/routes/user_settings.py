from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.schemas.user_settings import SettingsOut, UpdateSettingsRequest
from app.services.user_settings import get_or_create_settings, update_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SettingsOut)
async def get_settings_route(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    row = await get_or_create_settings(db, user_id)
    await db.commit()
    return SettingsOut.model_validate(row)


@router.patch("", response_model=SettingsOut)
async def update_settings_route(
    payload: UpdateSettingsRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    row = await update_settings(db, user_id, payload.model_dump(exclude_unset=True))
    await db.commit()
    return SettingsOut.model_validate(row)
