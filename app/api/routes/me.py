from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.api.presenters.users import me_response
from app.api.routes.auth import clear_auth_cookie
from app.api.http_errors import value_error
from app.models.user import User
from app.schemas.users import DeleteAccountResponse, MeResponse, UpdateProfileRequest
from app.services.users import delete_account, update_profile

router = APIRouter(tags=["me"])


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)):
    return me_response(user)


@router.patch("/me", response_model=MeResponse)
async def update_me(
    payload: UpdateProfileRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    user_id = user.id
    try:
        updated = await update_profile(db, user_id, payload.model_dump(exclude_unset=True))
        await db.commit()
        return me_response(updated)
    except ValueError as e:
        await db.rollback()
        raise value_error(
            e,
            code_statuses={"username_taken": 409, "user_not_found": 404},
            detail_overrides={
                "username_taken": "Username already in use",
                "user_not_found": "User not found",
            },
        ) from e


@router.delete("/me", response_model=DeleteAccountResponse)
async def delete_me(
    response: Response,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    user_id = user.id
    try:
        await delete_account(db, user_id)
        await db.commit()
    except ValueError as e:
        await db.rollback()
        raise HTTPException(status_code=404, detail="User not found") from e

    clear_auth_cookie(response)
    return DeleteAccountResponse(ok=True)
