"""Friend requests and two-stage introductions.

A friend request is answered by its target alone. An introduction needs two
consents in order: the connector (``via_user_id``) decides whether to vouch,
then the target decides whether to connect. Only the final approval writes a
friendship edge; a decline at any stage is terminal.

State changes are compare-and-swap updates guarded on the stage still being
``pending``, so a caller that loses a race sees ``already_processed`` instead
of overwriting the winner.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.intro_request import IntroRequest
from app.services.friends import add_friend_edge, are_friends
from app.services.user_settings import accepts_introductions
from app.services.users import ensure_users_exist

logger = logging.getLogger(__name__)

REQUEST_TYPES = ("friend", "introduction")

PENDING = "pending"
APPROVED = "approved"
DECLINED = "declined"
NOT_APPLICABLE = "n/a"

PENDING_PAIR_INDEX = "uq_intro_requests_pending_pair"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _integrity_code(exc: IntegrityError) -> str | None:
    # PostgreSQL names the index; SQLite only reports the kind of constraint
    text = str(exc.orig)
    if PENDING_PAIR_INDEX in text or "UNIQUE constraint failed" in text:
        return "duplicate_request"
    if "foreign key" in text.lower():
        return "user_not_found"
    return None


def _newest_first(q):
    return q.order_by(IntroRequest.created_at.desc(), IntroRequest.id.desc())


async def find_between(db: AsyncSession, from_user_id: UUID, to_user_id: UUID) -> IntroRequest | None:
    """Newest request for the ordered pair, whatever its status."""
    q = _newest_first(
        sa.select(IntroRequest).where(
            IntroRequest.from_user_id == from_user_id,
            IntroRequest.to_user_id == to_user_id,
        )
    ).limit(1)
    return (await db.execute(q)).scalar_one_or_none()


async def find_live_request(db: AsyncSession, from_user_id: UUID, to_user_id: UUID) -> IntroRequest | None:
    q = sa.select(IntroRequest).where(
        IntroRequest.from_user_id == from_user_id,
        IntroRequest.to_user_id == to_user_id,
        IntroRequest.status == PENDING,
    )
    return (await db.execute(q)).scalar_one_or_none()


async def submit_request(
    db: AsyncSession,
    *,
    request_type: str,
    from_user_id: UUID,
    to_user_id: UUID,
    via_user_id: UUID | None = None,
    message: str | None = None,
) -> IntroRequest:
    if request_type not in REQUEST_TYPES:
        raise ValueError("invalid_request_type")
    if from_user_id == to_user_id:
        raise ValueError("invalid_participants")

    if request_type == "introduction":
        if via_user_id is None or via_user_id in (from_user_id, to_user_id):
            raise ValueError("invalid_participants")
        await ensure_users_exist(db, from_user_id, to_user_id, via_user_id)
    else:
        via_user_id = None
        await ensure_users_exist(db, from_user_id, to_user_id)

    if await are_friends(db, from_user_id, to_user_id):
        raise ValueError("already_friends")

    # Directional: a pending B -> A request does not block A -> B.
    if await find_live_request(db, from_user_id, to_user_id) is not None:
        raise ValueError("duplicate_request")

    if request_type == "introduction" and not await accepts_introductions(db, to_user_id):
        raise ValueError("requests_disabled")

    sub_status = PENDING if request_type == "introduction" else NOT_APPLICABLE
    now = _now_utc()
    request = IntroRequest(
        type=request_type,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        via_user_id=via_user_id,
        message=(message or "").strip() or None,
        status=PENDING,
        connector_status=sub_status,
        target_status=sub_status,
        created_at=now,
        updated_at=now,
    )
    db.add(request)
    try:
        await db.flush()  # partial unique index rejects a concurrent duplicate
    except IntegrityError as exc:
        await db.rollback()
        code = _integrity_code(exc)
        if code is None:
            raise
        logger.warning(
            "request insert rejected code=%s from=%s to=%s",
            code,
            from_user_id,
            to_user_id,
        )
        raise ValueError(code) from exc

    logger.info(
        "request created id=%s type=%s from=%s to=%s via=%s",
        request.id,
        request_type,
        from_user_id,
        to_user_id,
        via_user_id,
    )
    return request


async def _load(db: AsyncSession, request_id: UUID) -> IntroRequest:
    request = await db.get(IntroRequest, request_id)
    if request is None:
        raise ValueError("not_found")
    return request


def _actionable_stage(request: IntroRequest, acting_user_id: UUID) -> str:
    """Which stage ``acting_user_id`` may act on: ``friend``, ``connector`` or ``target``."""
    if request.status != PENDING:
        raise ValueError("already_processed")

    if request.type == "friend":
        if acting_user_id != request.to_user_id:
            raise PermissionError("Only the recipient can respond to this friend request")
        return "friend"

    if request.connector_status == PENDING:
        if acting_user_id == request.via_user_id:
            return "connector"
        raise PermissionError("Only the connector can respond to this introduction right now")

    if request.connector_status == APPROVED and request.target_status == PENDING:
        if acting_user_id == request.to_user_id:
            return "target"
        if acting_user_id == request.via_user_id:
            # connector already answered
            raise ValueError("already_processed")
        raise PermissionError("Only the introduced user can respond to this introduction")

    raise ValueError("already_processed")


async def _transition(db: AsyncSession, request: IntroRequest, stage: str, outcome: str) -> IntroRequest:
    request_id = request.id
    guards = [IntroRequest.id == request_id, IntroRequest.status == PENDING]
    values: dict[str, object] = {"updated_at": _now_utc()}

    if stage == "friend":
        values["status"] = outcome
    elif stage == "connector":
        guards.append(IntroRequest.connector_status == PENDING)
        values["connector_status"] = outcome
        if outcome == DECLINED:
            values["status"] = DECLINED
    else:
        guards.append(IntroRequest.connector_status == APPROVED)
        guards.append(IntroRequest.target_status == PENDING)
        values["target_status"] = outcome
        values["status"] = outcome

    stmt = (
        sa.update(IntroRequest)
        .where(*guards)
        .values(**values)
        .returning(IntroRequest)
        .execution_options(synchronize_session=False, populate_existing=True)
    )
    updated = (await db.execute(stmt)).scalar_one_or_none()
    if updated is None:
        logger.warning("request transition lost race id=%s stage=%s outcome=%s", request_id, stage, outcome)
        raise ValueError("already_processed")

    logger.info("request %s id=%s stage=%s", outcome, request_id, stage)
    return updated


async def approve_request(db: AsyncSession, request_id: UUID, acting_user_id: UUID) -> IntroRequest:
    request = await _load(db, request_id)
    stage = _actionable_stage(request, acting_user_id)
    updated = await _transition(db, request, stage, APPROVED)

    if updated.status == APPROVED:
        await add_friend_edge(db, updated.from_user_id, updated.to_user_id)
    return updated


async def decline_request(db: AsyncSession, request_id: UUID, acting_user_id: UUID) -> IntroRequest:
    request = await _load(db, request_id)
    stage = _actionable_stage(request, acting_user_id)
    return await _transition(db, request, stage, DECLINED)


async def get_request(db: AsyncSession, request_id: UUID, acting_user_id: UUID) -> IntroRequest:
    request = await _load(db, request_id)
    if acting_user_id not in (request.from_user_id, request.to_user_id, request.via_user_id):
        raise PermissionError("Not a participant in this request")
    return request


async def list_received(db: AsyncSession, user_id: UUID) -> list[IntroRequest]:
    q = _newest_first(
        sa.select(IntroRequest).where(
            sa.or_(
                # friend requests
                sa.and_(
                    IntroRequest.type == "friend",
                    IntroRequest.to_user_id == user_id,
                    IntroRequest.status == PENDING,
                ),
                # stage 1: connector must vouch
                sa.and_(
                    IntroRequest.type == "introduction",
                    IntroRequest.via_user_id == user_id,
                    IntroRequest.status == PENDING,
                    IntroRequest.connector_status == PENDING,
                ),
                # stage 2: target decides after the connector approved
                sa.and_(
                    IntroRequest.type == "introduction",
                    IntroRequest.to_user_id == user_id,
                    IntroRequest.status == PENDING,
                    IntroRequest.connector_status == APPROVED,
                    IntroRequest.target_status == PENDING,
                ),
            )
        )
    )
    return list((await db.execute(q)).scalars().all())


async def list_sent(db: AsyncSession, user_id: UUID) -> list[IntroRequest]:
    q = _newest_first(sa.select(IntroRequest).where(IntroRequest.from_user_id == user_id))
    return list((await db.execute(q)).scalars().all())


async def list_activity(db: AsyncSession, user_id: UUID) -> list[IntroRequest]:
    q = _newest_first(
        sa.select(IntroRequest).where(
            sa.or_(
                IntroRequest.from_user_id == user_id,
                IntroRequest.to_user_id == user_id,
                IntroRequest.via_user_id == user_id,
            )
        )
    )
    return list((await db.execute(q)).scalars().all())
