"""Integration tests for registration, login and the bearer-token guard."""

import pytest
from httpx import ASGITransport, AsyncClient

from carpool.api.app import create_app
from carpool.api.middleware import limiter
from carpool.api.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from carpool.config import Settings

REGISTER_BODY = {
    "name": "  Dana Driver ",
    "email": "Dana@Example.com",
    "password": "secret123",
    "gender": "female",
    "phone": "555-0100",
}


class TestSecurityHelpers:
    def test_password_round_trip(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_token_carries_user_id(self):
        token = create_access_token(42, "s3cret", expire_minutes=5)
        assert decode_access_token(token, "s3cret") == 42

    def test_token_with_wrong_secret_rejected(self):
        token = create_access_token(42, "s3cret")
        assert decode_access_token(token, "other") is None

    def test_expired_token_rejected(self):
        token = create_access_token(42, "s3cret", expire_minutes=-1)
        assert decode_access_token(token, "s3cret") is None

    def test_garbage_rejected(self):
        assert decode_access_token("not-a-token", "s3cret") is None


@pytest.mark.asyncio
async def test_register_returns_token_and_user(client: AsyncClient):
    resp = await client.post("/api/auth/register", json=REGISTER_BODY)
    assert resp.status_code == 201
    data = resp.json()
    assert data["token"]
    assert data["user"]["email"] == "dana@example.com"
    assert data["user"]["name"] == "Dana Driver"
    assert data["user"]["rating"] == 5.0
    assert data["user"]["total_rides"] == 0
    assert "password" not in data["user"]
    assert "password_hash" not in data["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient):
    await client.post("/api/auth/register", json=REGISTER_BODY)
    resp = await client.post(
        "/api/auth/register", json={**REGISTER_BODY, "email": "dana@example.com"}
    )
    assert resp.status_code == 400
    assert resp.json() == {"message": "User already exists"}


@pytest.mark.asyncio
async def test_register_validation_errors(client: AsyncClient):
    resp = await client.post(
        "/api/auth/register",
        json={**REGISTER_BODY, "password": "123", "gender": "robot"},
    )
    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["errors"]}
    assert {"password", "gender"} <= fields


@pytest.mark.asyncio
async def test_login(client: AsyncClient):
    await client.post("/api/auth/register", json=REGISTER_BODY)
    resp = await client.post(
        "/api/auth/login",
        json={"email": "DANA@example.com", "password": "secret123"},
    )
    assert resp.status_code == 200
    token = resp.json()["token"]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "dana@example.com"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient):
    await client.post("/api/auth/register", json=REGISTER_BODY)
    resp = await client.post(
        "/api/auth/login",
        json={"email": "dana@example.com", "password": "nope-nope"},
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient):
    resp = await client.post(
        "/api/auth/login",
        json={"email": "ghost@example.com", "password": "secret123"},
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_protected_route_without_token(client: AsyncClient):
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["message"] == "No token, authorization denied"


@pytest.mark.asyncio
async def test_protected_route_with_bad_token(client: AsyncClient):
    resp = await client.get(
        "/api/auth/me", headers={"Authorization": "Bearer garbage"}
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token is not valid"


@pytest.mark.asyncio
async def test_token_for_missing_user(client: AsyncClient):
    token = create_access_token(999, "test-secret")
    resp = await client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_auth_rate_limit_comes_from_app_settings(database):
    limiter.reset()
    settings = Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret="test-secret",
        auth_rate_limit="2/minute",
    )
    app = create_app(settings, database)
    body = {"email": "ghost@example.com", "password": "secret123"}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        codes = [(await ac.post("/api/auth/login", json=body)).status_code for _ in range(3)]

    assert codes == [401, 401, 429]
