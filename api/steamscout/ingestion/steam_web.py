"""Steam Web API connector for player summaries, libraries, and vanity lookups."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError as PayloadValidationError

from steamscout.core.config import settings
from steamscout.core.errors import ConfigurationError, UpstreamError
from steamscout.ingestion.base import BaseConnector
from steamscout.ingestion.observability import FetchMonitor
from steamscout.ingestion.payloads import (
    GameListPayload,
    OwnedGamePayload,
    PlayerSummaryPayload,
    VanityResolutionPayload,
    validate_items,
)


def _response_envelope(payload: Any, operation: str) -> dict[str, Any]:
    """Return the ``response`` object every Web API method wraps its data in."""
    if not isinstance(payload, dict):
        raise UpstreamError(f"{operation} returned a non-object payload", kind="upstream_payload")
    envelope = payload.get("response")
    if envelope is None:
        return {}
    if not isinstance(envelope, dict):
        raise UpstreamError(f"{operation} returned a malformed response envelope", kind="upstream_payload")
    return envelope


class SteamWebConnector(BaseConnector):
    """Keyed ``api.steampowered.com`` methods used by the profile and valuation flows."""
    source_name = "steam_web"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        monitor: FetchMonitor | None = None,
    ) -> None:
        super().__init__(client, monitor=monitor)
        self.api_key = api_key or settings.steam_api_key
        self.base_url = (base_url or settings.steam_web_api_base).rstrip("/")

    def ensure_configured(self) -> None:
        """Fail fast, before any request goes out, when the API key is missing."""
        if not self.api_key:
            raise ConfigurationError("Missing STEAM_API_KEY", kind="missing_api_key")

    async def _call(self, operation: str, path: str, params: dict[str, Any]) -> dict[str, Any]:
        self.ensure_configured()
        payload = await self._get_json(
            operation,
            f"{self.base_url}{path}",
            params={"key": self.api_key, **params},
            context={key: value for key, value in params.items() if key not in {"steamid", "steamids"}},
        )
        return _response_envelope(payload, operation)

    async def get_player_summary(self, steam_id: str) -> PlayerSummaryPayload | None:
        """Return the player's summary, or None when the account is unknown."""
        envelope = await self._call(
            "player_summary", "/ISteamUser/GetPlayerSummaries/v2/", {"steamids": steam_id}
        )
        players = envelope.get("players")
        if not isinstance(players, list) or not players:
            return None
        try:
            return PlayerSummaryPayload.model_validate(players[0])
        except PayloadValidationError as exc:
            raise UpstreamError("Player summary payload was malformed", kind="upstream_payload") from exc

    async def get_owned_games(self, steam_id: str) -> GameListPayload:
        """Return the owned-games envelope (``games`` holds validated entries)."""
        envelope = await self._call(
            "owned_games",
            "/IPlayerService/GetOwnedGames/v1/",
            {"steamid": steam_id, "include_appinfo": 1, "include_played_free_games": 1},
        )
        return self._game_list(envelope, "owned_games")

    async def get_recently_played(self, steam_id: str) -> GameListPayload:
        """Return the recently-played envelope; upstream already caps its length."""
        envelope = await self._call(
            "recently_played", "/IPlayerService/GetRecentlyPlayedGames/v1/", {"steamid": steam_id}
        )
        return self._game_list(envelope, "recently_played")

    async def resolve_vanity(self, vanity: str) -> str | None:
        """Resolve a vanity alias to a 64-bit id, None when there is no match."""
        envelope = await self._call("resolve_vanity", "/ISteamUser/ResolveVanityURL/v1/", {"vanityurl": vanity})
        try:
            resolution = VanityResolutionPayload.model_validate(envelope)
        except PayloadValidationError as exc:
            raise UpstreamError("Vanity lookup payload was malformed", kind="upstream_payload") from exc
        if resolution.success != 1 or not resolution.steamid:
            return None
        return resolution.steamid

    @staticmethod
    def _game_list(envelope: dict[str, Any], operation: str) -> GameListPayload:
        try:
            listing = GameListPayload.model_validate(envelope)
        except PayloadValidationError as exc:
            raise UpstreamError(f"{operation} payload was malformed", kind="upstream_payload") from exc
        listing.games = validate_items(OwnedGamePayload, listing.games, source=operation)
        return listing
