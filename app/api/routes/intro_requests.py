from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.api.http_errors import permission_error, request_error
from app.schemas.intro_requests import CreateIntroRequest, IntroRequestOut
from app.services.intro_requests import (
    approve_request,
    decline_request,
    get_request,
    list_activity,
    list_received,
    list_sent,
    submit_request,
)

router = APIRouter(prefix="/requests", tags=["requests"])
activity_router = APIRouter(tags=["requests"])


@router.post("", response_model=IntroRequestOut, status_code=201)
async def submit_request_route(
    payload: CreateIntroRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        request = await submit_request(
            db,
            request_type=payload.type,
            from_user_id=user_id,
            to_user_id=payload.to_user_id,
            via_user_id=payload.via_user_id,
            message=payload.message,
        )
        await db.commit()
        return IntroRequestOut.model_validate(request)
    except ValueError as e:
        await db.rollback()
        raise request_error(e, default_detail="Could not create request") from e


@router.get("/received", response_model=list[IntroRequestOut])
async def received_route(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return [IntroRequestOut.model_validate(r) for r in await list_received(db, user_id)]


@router.get("/sent", response_model=list[IntroRequestOut])
async def sent_route(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return [IntroRequestOut.model_validate(r) for r in await list_sent(db, user_id)]


@router.get("/{request_id}", response_model=IntroRequestOut)
async def request_detail_route(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        return IntroRequestOut.model_validate(await get_request(db, request_id, user_id))
    except PermissionError as e:
        raise permission_error(e) from e
    except ValueError as e:
        raise request_error(e) from e


@router.post("/{request_id}/approve", response_model=IntroRequestOut)
async def approve_route(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        request = await approve_request(db, request_id, user_id)
        await db.commit()
        return IntroRequestOut.model_validate(request)
    except PermissionError as e:
        await db.rollback()
        raise permission_error(e) from e
    except ValueError as e:
        await db.rollback()
        raise request_error(e, default_detail="Could not approve request") from e


@router.post("/{request_id}/decline", response_model=IntroRequestOut)
async def decline_route(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    try:
        request = await decline_request(db, request_id, user_id)
        await db.commit()
        return IntroRequestOut.model_validate(request)
    except PermissionError as e:
        await db.rollback()
        raise permission_error(e) from e
    except ValueError as e:
        await db.rollback()
        raise request_error(e, default_detail="Could not decline request") from e


@activity_router.get("/activity", response_model=list[IntroRequestOut])
async def activity_route(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    return [IntroRequestOut.model_validate(r) for r in await list_activity(db, user_id)]
