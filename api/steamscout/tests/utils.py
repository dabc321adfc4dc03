"""In-memory stand-in for the Steam Web API and storefront, served over httpx.MockTransport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

STEAM_ID = "76561197960287930"
OTHER_STEAM_ID = "76561197960287931"

SUMMARY_PATH = "/ISteamUser/GetPlayerSummaries/v2/"
OWNED_PATH = "/IPlayerService/GetOwnedGames/v1/"
RECENT_PATH = "/IPlayerService/GetRecentlyPlayedGames/v1/"
VANITY_PATH = "/ISteamUser/ResolveVanityURL/v1/"
FEATURED_PATH = "/api/featuredcategories/"
DETAILS_PATH = "/api/appdetails"
SEARCH_PATH = "/search/results/"


def owned_game(appid: int, name: str, minutes: int = 0, **extra: Any) -> dict[str, Any]:
    return {"appid": appid, "name": name, "playtime_forever": minutes, **extra}


def featured_item(appid: int, name: str, *, discount: int = 0, price: int | None = 1999) -> dict[str, Any]:
    return {
        "id": appid,
        "name": name,
        "header_image": f"https://cdn.example/{appid}.jpg",
        "discount_percent": discount,
        "final_price": price,
        "original_price": price,
    }


def app_details(
    *,
    genres: list[str] | None = None,
    categories: list[str] | None = None,
    price: int | None = None,
    currency: str = "USD",
    discount: int = 0,
    release: str | None = "21 Aug, 2020",
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "genres": [{"id": str(i), "description": name} for i, name in enumerate(genres or [])],
        "categories": [{"id": i, "description": name} for i, name in enumerate(categories or [])],
    }
    if price is not None:
        data["price_overview"] = {
            "currency": currency,
            "initial": price,
            "final": price,
            "discount_percent": discount,
        }
    if release is not None:
        data["release_date"] = {"coming_soon": False, "date": release}
    return {"success": True, "data": data}


@dataclass
class FakeSteam:
    """Configurable upstream; every request is recorded in ``calls``."""

    summary: dict[str, Any] | None = field(
        default_factory=lambda: {
            "steamid": STEAM_ID,
            "personaname": "Gabe",
            "avatarfull": "https://avatars.example/full.jpg",
            "profileurl": "https://steamcommunity.com/id/gabe/",
            "loccountrycode": "US",
            "communityvisibilitystate": 3,
            "lastlogoff": 1700000000,
        }
    )
    owned: list[Any] = field(default_factory=list)
    game_count: int | None = None
    recent: list[Any] = field(default_factory=list)
    vanity: dict[str, str] = field(default_factory=dict)
    featured: dict[str, Any] = field(default_factory=dict)
    details: dict[int, dict[str, Any]] = field(default_factory=dict)
    specials_total: int | None = None
    failing_paths: dict[str, int] = field(default_factory=dict)
    failing_appids: set[int] = field(default_factory=set)
    calls: list[httpx.Request] = field(default_factory=list)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.calls]

    def count(self, path: str) -> int:
        return self.paths().count(path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if path in self.failing_paths:
            return httpx.Response(self.failing_paths[path], json={"error": "boom"})
        if path == SUMMARY_PATH:
            players = [self.summary] if self.summary else []
            return httpx.Response(200, json={"response": {"players": players}})
        if path == OWNED_PATH:
            count = self.game_count if self.game_count is not None else len(self.owned)
            return httpx.Response(200, json={"response": {"game_count": count, "games": self.owned}})
        if path == RECENT_PATH:
            return httpx.Response(200, json={"response": {"total_count": len(self.recent), "games": self.recent}})
        if path == VANITY_PATH:
            alias = request.url.params.get("vanityurl", "")
            if alias in self.vanity:
                return httpx.Response(200, json={"response": {"success": 1, "steamid": self.vanity[alias]}})
            return httpx.Response(200, json={"response": {"success": 42, "message": "No match"}})
        if path == FEATURED_PATH:
            return httpx.Response(200, json=self.featured)
        if path == SEARCH_PATH:
            if self.specials_total is None:
                return httpx.Response(200, json={"success": 1})
            return httpx.Response(200, json={"success": 1, "total_count": self.specials_total})
        if path == DETAILS_PATH:
            appid = int(request.url.params["appids"])
            if appid in self.failing_appids:
                return httpx.Response(500, json={})
            entry = self.details.get(appid, {"success": False})
            return httpx.Response(200, json={str(appid): entry})
        return httpx.Response(404, json={})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
