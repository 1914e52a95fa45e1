#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.db.session import AsyncSessionLocal
from app.models.friendship import Friendship
from app.models.intro_request import IntroRequest
from app.models.user import User
from app.models.user_settings import UserSettings

logger = logging.getLogger("check_graph")


@dataclass
class GraphStats:
    users: int = 0
    friendships: int = 0
    pending_requests: int = 0
    approved_requests: int = 0
    declined_requests: int = 0
    settings_rows: int = 0
    stale_pending: int = 0
    declined_stale: int = 0


def _pair(a: UUID, b: UUID) -> tuple[UUID, UUID]:
    return (a, b) if a < b else (b, a)


def find_stale_requests(
    pending: list[tuple[UUID, UUID, UUID]],
    edges: set[tuple[UUID, UUID]],
) -> list[UUID]:
    """Ids of pending requests whose two parties are already friends.

    ``pending`` holds ``(request_id, from_user_id, to_user_id)`` rows and
    ``edges`` canonical ``(low, high)`` pairs.
    """
    return [request_id for request_id, a, b in pending if _pair(a, b) in edges]


async def _count(db: AsyncSession, stmt) -> int:
    return int((await db.execute(stmt)).scalar_one())


async def run_check(db: AsyncSession, *, apply: bool, verbose: bool) -> GraphStats:
    stats = GraphStats()
    stats.users = await _count(db, sa.select(sa.func.count()).select_from(User))
    stats.friendships = await _count(db, sa.select(sa.func.count()).select_from(Friendship))
    stats.settings_rows = await _count(db, sa.select(sa.func.count()).select_from(UserSettings))

    status_rows = (
        await db.execute(sa.select(IntroRequest.status, sa.func.count()).group_by(IntroRequest.status))
    ).all()
    by_status = {status: int(n) for status, n in status_rows}
    stats.pending_requests = by_status.get("pending", 0)
    stats.approved_requests = by_status.get("approved", 0)
    stats.declined_requests = by_status.get("declined", 0)

    edges = {
        (low, high)
        for low, high in (
            await db.execute(sa.select(Friendship.user_low_id, Friendship.user_high_id))
        ).all()
    }
    pending = [
        (row.id, row.from_user_id, row.to_user_id)
        for row in (
            await db.execute(
                sa.select(IntroRequest.id, IntroRequest.from_user_id, IntroRequest.to_user_id).where(
                    IntroRequest.status == "pending"
                )
            )
        ).all()
    ]

    stale = find_stale_requests(pending, edges)
    stats.stale_pending = len(stale)
    if verbose:
        for request_id in stale:
            logger.info("stale pending request id=%s (parties already friends)", request_id)

    if apply and stale:
        result = await db.execute(
            sa.update(IntroRequest)
            .where(IntroRequest.id.in_(stale), IntroRequest.status == "pending")
            .values(
                status="declined",
                # decline whichever introduction stage is still open; friend requests stay n/a
                connector_status=sa.case(
                    (IntroRequest.connector_status == "pending", "declined"),
                    else_=IntroRequest.connector_status,
                ),
                target_status=sa.case(
                    (
                        sa.and_(
                            IntroRequest.connector_status == "approved",
                            IntroRequest.target_status == "pending",
                        ),
                        "declined",
                    ),
                    else_=IntroRequest.target_status,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        stats.declined_stale = int(result.rowcount or 0)
        logger.info("declined %s stale pending requests", stats.declined_stale)

    return stats


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Report social graph row counts and pending requests made obsolete by existing friendships.",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Decline stale pending requests. Without this flag the script only reports.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log row-level findings.")
    return parser.parse_args()


def _print_summary(*, apply: bool, stats: GraphStats) -> None:
    mode = "apply" if apply else "dry-run"
    print("Social graph check complete")
    print(f"mode: {mode}")
    print(f"users: {stats.users}")
    print(f"friendships: {stats.friendships}")
    print(f"settings_rows: {stats.settings_rows}")
    print(f"pending_requests: {stats.pending_requests}")
    print(f"approved_requests: {stats.approved_requests}")
    print(f"declined_requests: {stats.declined_requests}")
    print(f"stale_pending: {stats.stale_pending}")
    print(f"declined_stale: {stats.declined_stale}")


async def _main_async(args: argparse.Namespace) -> GraphStats:
    async with AsyncSessionLocal() as db:
        return await run_check(db, apply=args.apply, verbose=args.verbose)


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        stats = asyncio.run(_main_async(args))
    except (DBAPIError, OSError):
        logger.exception("database check failed")
        return 1
    _print_summary(apply=args.apply, stats=stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
