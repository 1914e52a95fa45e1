import pytest

pytestmark = pytest.mark.anyio


async def test_register_login_me(client, user_factory, login_helper):
    user = await user_factory(client, display_name="A")
    await login_helper(client, email=user["email"], password=user["password"])

    r = await client.get("/me")
    assert r.status_code == 200
    data = r.json()
    assert data["id"] == user["id"]
    assert data["email"] == user["email"]
    assert data["username"] == user["username"]
    assert data["display_name"] == "A"


async def test_register_creates_default_settings(client, authed_user):
    await authed_user(client)

    r = await client.get("/settings")
    assert r.status_code == 200
    assert r.json() == {
        "notifications_enabled": True,
        "email_updates_enabled": False,
        "intro_requests_enabled": True,
    }


async def test_register_rejects_duplicate_email_or_username(client, user_factory):
    user = await user_factory(client)

    same_email = await client.post(
        "/auth/register",
        json={
            "email": user["email"].upper(),
            "username": "someone_else",
            "display_name": "Other",
            "password": "SuperSecret123",
        },
    )
    same_username = await client.post(
        "/auth/register",
        json={
            "email": "other@example.com",
            "username": user["username"],
            "display_name": "Other",
            "password": "SuperSecret123",
        },
    )
    assert same_email.status_code == 409
    assert same_username.status_code == 409


async def test_login_rejects_wrong_password(client, user_factory):
    user = await user_factory(client)
    r = await client.post("/auth/login", json={"email": user["email"], "password": "wrong-password"})
    assert r.status_code == 401
    assert client.cookies.get("access_token") is None


async def test_me_requires_auth(client):
    r = await client.get("/me")
    assert r.status_code == 401


async def test_garbage_token_is_rejected(client, set_auth_cookie):
    set_auth_cookie(client, "not-a-jwt")
    r = await client.get("/friends")
    assert r.status_code == 401


async def test_logout_revokes_auth_cookie(client, user_factory, login_helper):
    user = await user_factory(client, display_name="A")
    await login_helper(client, email=user["email"], password=user["password"])

    me_before = await client.get("/me")
    assert me_before.status_code == 200

    logout = await client.post("/auth/logout")
    assert logout.status_code == 200
    assert logout.json() == {"ok": True}

    me_after = await client.get("/me")
    assert me_after.status_code == 401


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}
