# File: tests/test_server.py
# HTTP surface tests: aiohttp TestServer with the in-memory browser driver
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from armory_scout.server import CORS_HEADERS, ENGINE_KEY, SWEEPER_KEY, create_app


@pytest_asyncio.fixture
async def client(memory_driver, config) -> AsyncIterator[TestClient]:
    app = create_app(config, driver=memory_driver)
    async with TestClient(TestServer(app)) as client:
        yield client


@pytest.mark.asyncio()
async def test_status_route(client: TestClient):
    resp = await client.get("/")
    assert resp.status == 200
    data = await resp.json()
    assert data == {"message": "ok", "cacheSize": 0, "cacheCapacity": 50}


@pytest.mark.asyncio()
async def test_character_route_miss_then_hit(client: TestClient, memory_driver):
    resp = await client.get("/api/Frostbite")
    assert resp.status == 200
    assert resp.headers["X-Cache"] == "MISS"
    first = await resp.json()
    assert first["left"] == [{"href": "/item/1", "icon": "ring.png"}]
    assert first["right"] == [] and first["bottom"] == []
    assert "scrapedAt" in first

    resp = await client.get("/api/frostbite")
    assert resp.status == 200
    assert resp.headers["X-Cache"] == "HIT"
    assert await resp.json() == first
    assert len(memory_driver.sessions) == 1

    status = await (await client.get("/")).json()
    assert status["cacheSize"] == 1


@pytest.mark.asyncio()
async def test_challenge_is_500(client: TestClient):
    resp = await client.get("/api/Gated")
    assert resp.status == 500
    data = await resp.json()
    assert "error" in data
    assert "X-Cache" not in resp.headers


@pytest.mark.asyncio()
async def test_missing_content_times_out_with_500(client: TestClient):
    resp = await client.get("/api/Empty")
    assert resp.status == 500
    assert "timeout" in (await resp.json())["error"]


@pytest.mark.asyncio()
async def test_cors_headers_on_responses(client: TestClient):
    resp = await client.get("/")
    for name, value in CORS_HEADERS.items():
        assert resp.headers[name] == value

    resp = await client.get("/api/Gated")
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


@pytest.mark.asyncio()
async def test_cors_preflight(client: TestClient):
    resp = await client.options("/api/Frostbite", headers={"Origin": "https://example.com"})
    assert resp.status == 200
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert "GET" in resp.headers["Access-Control-Allow-Methods"]


@pytest.mark.asyncio()
async def test_unknown_route_is_404_with_cors(client: TestClient):
    resp = await client.get("/nope")
    assert resp.status == 404
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


@pytest.mark.asyncio()
async def test_lifecycle_starts_and_stops_sweeper(memory_driver, config):
    app = create_app(config, driver=memory_driver)
    sweeper = app[SWEEPER_KEY]
    async with TestClient(TestServer(app)):
        assert sweeper.running
        assert app[ENGINE_KEY].store.capacity == config.cache_capacity
    assert not sweeper.running
