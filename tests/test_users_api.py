import uuid

import pytest

pytestmark = pytest.mark.anyio


async def _befriend(client, set_auth_cookie, a, b):
    set_auth_cookie(client, a["token"])
    r = await client.post("/requests", json={"type": "friend", "to_user_id": b["id"]})
    assert r.status_code == 201, r.text
    set_auth_cookie(client, b["token"])
    r = await client.post(f"/requests/{r.json()['id']}/approve")
    assert r.status_code == 200, r.text


async def test_search_matches_name_and_excludes_self(client, authed_user, unique_str):
    tag = unique_str("zed")
    match = await authed_user(client, display_name=f"Zoe {tag}")
    await authed_user(client, display_name="Nobody")
    me = await authed_user(client, display_name=f"Me {tag}")

    r = await client.get("/users/search", params={"q": tag.upper()})
    assert r.status_code == 200
    assert [u["id"] for u in r.json()] == [match["id"]]
    assert me["id"] not in {u["id"] for u in r.json()}


async def test_get_user_profile(client, authed_user):
    other = await authed_user(client, display_name="Other")
    await authed_user(client)

    r = await client.get(f"/users/{other['id']}")
    assert r.status_code == 200
    assert r.json()["display_name"] == "Other"
    assert "email" not in r.json()

    missing = await client.get(f"/users/{uuid.uuid4()}")
    assert missing.status_code == 404


async def test_update_profile(client, authed_user):
    await authed_user(client)

    r = await client.patch(
        "/me",
        json={"display_name": "New Name", "location": "Lisbon", "instagram_handle": "newname"},
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["display_name"] == "New Name"
    assert data["location"] == "Lisbon"
    assert data["instagram_handle"] == "newname"

    cleared = await client.patch("/me", json={"location": None})
    assert cleared.json()["location"] is None
    assert cleared.json()["display_name"] == "New Name"


async def test_update_profile_rejects_taken_username(client, authed_user):
    other = await authed_user(client)
    await authed_user(client)

    r = await client.patch("/me", json={"username": other["username"]})
    assert r.status_code == 409
    assert r.json()["detail"] == "Username already in use"


async def test_settings_patch_is_partial(client, authed_user):
    await authed_user(client)

    r = await client.patch("/settings", json={"email_updates_enabled": True})
    assert r.status_code == 200
    assert r.json() == {
        "notifications_enabled": True,
        "email_updates_enabled": True,
        "intro_requests_enabled": True,
    }
    assert (await client.get("/settings")).json()["email_updates_enabled"] is True


async def test_unfriend_is_symmetric_and_idempotent(client, authed_user, set_auth_cookie):
    a = await authed_user(client, display_name="A")
    b = await authed_user(client, display_name="B")
    await _befriend(client, set_auth_cookie, a, b)

    set_auth_cookie(client, a["token"])
    assert [f["id"] for f in (await client.get("/friends")).json()] == [b["id"]]

    r = await client.delete(f"/friends/{b['id']}")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "removed": True}
    assert (await client.get("/friends")).json() == []

    set_auth_cookie(client, b["token"])
    assert (await client.get("/friends")).json() == []
    again = await client.delete(f"/friends/{a['id']}")
    assert again.json() == {"ok": True, "removed": False}


async def test_unfriend_errors(client, authed_user):
    me = await authed_user(client)

    assert (await client.delete(f"/friends/{me['id']}")).status_code == 400
    assert (await client.delete(f"/friends/{uuid.uuid4()}")).status_code == 404


async def test_friends_of_friends_and_map(client, authed_user, set_auth_cookie):
    u = await authed_user(client, display_name="U")
    a = await authed_user(client, display_name="A")
    b = await authed_user(client, display_name="B")
    x = await authed_user(client, display_name="X")
    y = await authed_user(client, display_name="Y")
    for left, right in [(u, a), (u, b), (a, x), (b, x), (b, y)]:
        await _befriend(client, set_auth_cookie, left, right)

    set_auth_cookie(client, u["token"])
    fof = await client.get("/friends/fof")
    assert fof.status_code == 200
    assert [
        (item["user"]["id"], [c["id"] for c in item["mutual_connectors"]]) for item in fof.json()
    ] == [
        (x["id"], [a["id"], b["id"]]),
        (y["id"], [b["id"]]),
    ]

    friend_map = await client.get("/friends/map")
    assert friend_map.status_code == 200
    data = friend_map.json()
    assert data["me"]["id"] == u["id"]
    assert [f["id"] for f in data["friends"]] == [a["id"], b["id"]]
    assert [item["user"]["id"] for item in data["friends_of_friends"]] == [x["id"], y["id"]]


async def test_delete_account_removes_edges_and_requests(client, authed_user, set_auth_cookie):
    a = await authed_user(client)
    b = await authed_user(client)
    c = await authed_user(client)
    await _befriend(client, set_auth_cookie, a, b)
    set_auth_cookie(client, c["token"])
    pending = await client.post("/requests", json={"type": "friend", "to_user_id": a["id"]})
    assert pending.status_code == 201

    set_auth_cookie(client, a["token"])
    r = await client.delete("/me")
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert (await client.get("/me")).status_code == 401

    set_auth_cookie(client, b["token"])
    assert (await client.get("/friends")).json() == []
    set_auth_cookie(client, c["token"])
    assert (await client.get("/requests/sent")).json() == []
    assert (await client.get(f"/users/{a['id']}")).status_code == 404
