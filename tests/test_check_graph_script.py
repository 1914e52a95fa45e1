import uuid

import pytest

from app.services.friends import add_friend_edge
from app.services.intro_requests import approve_request, find_between, list_received, submit_request
from scripts.check_graph import find_stale_requests, run_check


def test_find_stale_requests_matches_either_direction():
    a, b, c = sorted(uuid.uuid4() for _ in range(3))
    r1, r2, r3 = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    pending = [(r1, a, b), (r2, b, a), (r3, a, c)]

    assert find_stale_requests(pending, {(a, b)}) == [r1, r2]


def test_find_stale_requests_without_edges():
    assert find_stale_requests([(uuid.uuid4(), uuid.uuid4(), uuid.uuid4())], set()) == []


@pytest.mark.anyio
@pytest.mark.parametrize("apply", [False, True])
async def test_run_check_reports_and_optionally_declines(db_session, make_user, apply):
    a, b, c = await make_user(), await make_user(), await make_user()
    a_id, b_id = a.id, b.id
    await submit_request(db_session, request_type="friend", from_user_id=a_id, to_user_id=b_id)
    await submit_request(db_session, request_type="friend", from_user_id=c.id, to_user_id=a_id)
    # edge written outside the request workflow leaves a->b pending
    await add_friend_edge(db_session, a_id, b_id)
    await db_session.commit()

    stats = await run_check(db_session, apply=apply, verbose=True)

    assert stats.users == 3
    assert stats.friendships == 1
    assert stats.pending_requests == 2
    assert stats.stale_pending == 1
    assert stats.declined_stale == (1 if apply else 0)

    db_session.expire_all()
    stale = await find_between(db_session, a_id, b_id)
    assert stale.status == ("declined" if apply else "pending")


@pytest.mark.anyio
@pytest.mark.parametrize(
    "connector_approved, expected_stages",
    [
        (False, ("declined", "pending")),
        (True, ("approved", "declined")),
    ],
)
async def test_run_check_declines_the_open_introduction_stage(
    db_session, make_user, connector_approved, expected_stages
):
    r, t, c = await make_user(), await make_user(), await make_user()
    r_id, t_id, c_id = r.id, t.id, c.id
    intro = await submit_request(
        db_session,
        request_type="introduction",
        from_user_id=r_id,
        to_user_id=t_id,
        via_user_id=c_id,
    )
    if connector_approved:
        await approve_request(db_session, intro.id, c_id)
    await add_friend_edge(db_session, r_id, t_id)
    await db_session.commit()

    stats = await run_check(db_session, apply=True, verbose=False)
    assert stats.declined_stale == 1

    db_session.expire_all()
    declined = await find_between(db_session, r_id, t_id)
    assert declined.status == "declined"
    assert (declined.connector_status, declined.target_status) == expected_stages
    assert await list_received(db_session, c_id) == []
    assert await list_received(db_session, t_id) == []
