from typing import AsyncIterator

import httpx
from fastapi import Depends

from steamscout.core.config import settings
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.ingestion.storefront import StorefrontConnector


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """One client per request, shared by every upstream fetch it makes."""
    async with httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        headers={"Accept": "application/json"},
        follow_redirects=True,
    ) as client:
        yield client


async def get_steam_web_connector(client: httpx.AsyncClient = Depends(get_http_client)) -> SteamWebConnector:
    return SteamWebConnector(client)


async def get_storefront_connector(client: httpx.AsyncClient = Depends(get_http_client)) -> StorefrontConnector:
    return StorefrontConnector(client)
