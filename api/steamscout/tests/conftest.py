"""Shared pytest fixtures for service and API tests."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from steamscout.api.deps import get_http_client
from steamscout.core.config import settings
from steamscout.ingestion.observability import fetch_monitor
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.ingestion.storefront import StorefrontConnector
from steamscout.main import app
from steamscout.tests.utils import FakeSteam


@pytest_asyncio.fixture(autouse=True)
async def _reset_fetch_monitor():
    await fetch_monitor.reset()
    yield
    await fetch_monitor.reset()


@pytest.fixture(autouse=True)
def _steam_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "steam_api_key", "test-key")


@pytest.fixture()
def fake_steam() -> FakeSteam:
    return FakeSteam()


@pytest_asyncio.fixture()
async def upstream_client(fake_steam: FakeSteam) -> httpx.AsyncClient:
    async with fake_steam.client() as client:
        yield client


@pytest.fixture()
def web_connector(upstream_client: httpx.AsyncClient) -> SteamWebConnector:
    return SteamWebConnector(upstream_client)


@pytest.fixture()
def store_connector(upstream_client: httpx.AsyncClient) -> StorefrontConnector:
    return StorefrontConnector(upstream_client)


@pytest_asyncio.fixture()
async def client(fake_steam: FakeSteam) -> httpx.AsyncClient:
    async def _get_test_http_client():
        async with fake_steam.client() as upstream:
            yield upstream

    app.dependency_overrides[get_http_client] = _get_test_http_client
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.pop(get_http_client, None)
