"""Integration tests for ride-scoped chat."""

import pytest
from httpx import AsyncClient


@pytest.fixture
def ride_with_members(client, register, create_ride):
    async def _build():
        driver, passenger, outsider = await register(), await register(), await register()
        ride = await create_ride(driver)
        await client.post(f"/api/rides/{ride['id']}/join", headers=passenger["headers"])
        return ride, driver, passenger, outsider

    return _build


@pytest.mark.asyncio
async def test_members_exchange_messages_in_order(client: AsyncClient, ride_with_members):
    ride, driver, passenger, _ = await ride_with_members()
    url = f"/api/chat/{ride['id']}"

    first = await client.post(url, json={"message": "  Leaving at 8  "}, headers=driver["headers"])
    assert first.status_code == 201
    assert first.json()["message"] == "Leaving at 8"
    assert first.json()["sender"]["id"] == driver["id"]
    assert "email" in first.json()["sender"]

    second = await client.post(url, json={"message": "See you"}, headers=passenger["headers"])
    assert second.status_code == 201

    resp = await client.get(url, headers=passenger["headers"])
    assert resp.status_code == 200
    assert [m["message"] for m in resp.json()] == ["Leaving at 8", "See you"]
    assert [m["sender"]["id"] for m in resp.json()] == [driver["id"], passenger["id"]]


@pytest.mark.asyncio
async def test_outsider_cannot_read(client: AsyncClient, ride_with_members):
    ride, _, _, outsider = await ride_with_members()
    resp = await client.get(f"/api/chat/{ride['id']}", headers=outsider["headers"])
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_outsider_cannot_post(client: AsyncClient, ride_with_members):
    ride, _, _, outsider = await ride_with_members()
    resp = await client.post(
        f"/api/chat/{ride['id']}", json={"message": "hello?"}, headers=outsider["headers"]
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_former_passenger_loses_access(client: AsyncClient, ride_with_members):
    ride, _, passenger, _ = await ride_with_members()
    await client.delete(f"/api/rides/{ride['id']}/leave", headers=passenger["headers"])
    resp = await client.get(f"/api/chat/{ride['id']}", headers=passenger["headers"])
    assert resp.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "x" * 501])
async def test_message_length_validated(client: AsyncClient, ride_with_members, text):
    ride, driver, _, _ = await ride_with_members()
    resp = await client.post(
        f"/api/chat/{ride['id']}", json={"message": text}, headers=driver["headers"]
    )
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "message"


@pytest.mark.asyncio
async def test_message_at_limit_accepted(client: AsyncClient, ride_with_members):
    ride, driver, _, _ = await ride_with_members()
    resp = await client.post(
        f"/api/chat/{ride['id']}", json={"message": "x" * 500}, headers=driver["headers"]
    )
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_chat_for_missing_ride(client: AsyncClient, register):
    user = await register()
    resp = await client.get("/api/chat/9999", headers=user["headers"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_chat_requires_auth(client: AsyncClient):
    resp = await client.get("/api/chat/1")
    assert resp.status_code == 401
