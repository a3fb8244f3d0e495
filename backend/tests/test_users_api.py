from datetime import timedelta

import pytest

from social_api.core.security import create_access_token, decode_token

from conftest import TEST_PASSWORD, signup

pytestmark = pytest.mark.asyncio


async def test_signup_returns_token(client):
    # --- ACT ---
    response = await client.post("/api/user/signup", json={"email": "New.User@Example.com", "password": TEST_PASSWORD})

    # --- ASSERT ---
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["user"]["email"] == "new.user@example.com"
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 3 * 24 * 60 * 60
    assert decode_token(body["token"])["sub"] == str(body["user"]["id"])


async def test_signup_duplicate_email(client, alice):
    response = await client.post("/api/user/signup", json={"email": "ALICE@example.com", "password": TEST_PASSWORD})

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already in use"


@pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "ALLUPPERCASE1!", "NoDigits!!", "NoSpecial123"])
async def test_signup_weak_password(client, password):
    response = await client.post("/api/user/signup", json={"email": "weak@example.com", "password": password})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "ValidationError"
    assert body["detail"].startswith("password:")


async def test_signup_invalid_email(client):
    response = await client.post("/api/user/signup", json={"email": "not-an-email", "password": TEST_PASSWORD})

    assert response.status_code == 400


async def test_login(client, alice):
    response = await client.post("/api/user/login", json={"email": "alice@example.com", "password": TEST_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == alice["id"]
    assert body["token"]


async def test_login_wrong_password(client, alice):
    response = await client.post("/api/user/login", json={"email": "alice@example.com", "password": "Wr0ng!Password"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password"


async def test_login_unknown_email(client):
    response = await client.post("/api/user/login", json={"email": "ghost@example.com", "password": TEST_PASSWORD})

    assert response.status_code == 401


async def test_credentials_in_query_rejected(client, alice):
    response = await client.post(
        "/api/user/login",
        params={"password": TEST_PASSWORD},
        json={"email": "alice@example.com", "password": TEST_PASSWORD},
    )

    assert response.status_code == 400
    assert "request body" in response.json()["detail"]


async def test_login_attempts_are_throttled(client, alice):
    """После серии неудачных попыток логин блокируется даже с верным паролем"""
    # --- ARRANGE ---
    for _ in range(5):
        failed = await client.post("/api/user/login", json={"email": "alice@example.com", "password": "Wr0ng!Password"})
        assert failed.status_code == 401

    # --- ACT ---
    response = await client.post("/api/user/login", json={"email": "alice@example.com", "password": TEST_PASSWORD})

    # --- ASSERT ---
    assert response.status_code == 429
    assert response.json()["error"] == "RateLimitError"


async def test_successful_login_resets_attempts(client, alice):
    for _ in range(4):
        await client.post("/api/user/login", json={"email": "alice@example.com", "password": "Wr0ng!Password"})

    assert (await client.post("/api/user/login", json={"email": "alice@example.com", "password": TEST_PASSWORD})).status_code == 200
    for _ in range(4):
        await client.post("/api/user/login", json={"email": "alice@example.com", "password": "Wr0ng!Password"})
    assert (await client.post("/api/user/login", json={"email": "alice@example.com", "password": TEST_PASSWORD})).status_code == 200


async def test_profile(client, alice):
    response = await client.get("/api/user/profile", headers=alice["headers"])

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == alice["id"]
    assert body["email"] == "alice@example.com"
    assert body["role"] == "user"
    assert "password_hash" not in body


async def test_profile_without_token(client):
    response = await client.get("/api/user/profile")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_expired_token(client, alice):
    token = create_access_token(alice["id"], expires_delta=timedelta(seconds=-1))

    response = await client.get("/api/user/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


async def test_token_of_unknown_user(client):
    token = create_access_token(9999)

    response = await client.get("/api/user/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


async def test_independent_users(client):
    first = await signup(client, "first@example.com")
    second = await signup(client, "second@example.com")

    assert first["id"] != second["id"]
