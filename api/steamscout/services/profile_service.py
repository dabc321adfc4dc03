"""Profile aggregation: player summary, owned games, and recent games.

Invariants:
- Each of the three upstream calls degrades on its own; a valid id always
  yields a snapshot.
- Top games are ordered by lifetime minutes (stable) and capped at 10.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from steamscout.core.config import settings
from steamscout.ingestion.payloads import GameListPayload, OwnedGamePayload, PlayerSummaryPayload
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.models.library import LibraryEntry, LibrarySnapshot, PlayerProfile, ProfileSnapshot, Visibility
from steamscout.services.fetch_pool import BoundedFetchPool
from steamscout.services.identity_service import validate_steam_id
from steamscout.utils.datetime import epoch_to_datetime

TOP_GAMES_LIMIT = 10
RECENT_GAMES_LIMIT = 10

logger = logging.getLogger("steamscout.services.profile")


def header_image_url(appid: int) -> str:
    """Deterministic store header image for an app id."""
    return f"{settings.steam_asset_base}/{appid}/header.jpg"


def logo_image_url(appid: int, logo_hash: str | None) -> str | None:
    if not logo_hash:
        return None
    return f"{settings.steam_logo_base}/{appid}/{logo_hash}.jpg"


def map_library_entry(game: OwnedGamePayload, *, include_two_weeks: bool = False) -> LibraryEntry:
    """Convert an upstream game entry into a library entry."""
    minutes_2weeks = game.playtime_2weeks
    if include_two_weeks and minutes_2weeks is None:
        minutes_2weeks = 0
    return LibraryEntry(
        appid=game.appid,
        name=game.name,
        header_image=header_image_url(game.appid),
        minutes=game.playtime_forever,
        minutes_2weeks=minutes_2weeks,
        last_played_at=epoch_to_datetime(game.rtime_last_played),
        logo_url=logo_image_url(game.appid, game.img_logo_url),
    )


def map_player_profile(summary: PlayerSummaryPayload) -> PlayerProfile:
    return PlayerProfile(
        persona_name=summary.personaname,
        avatar=summary.avatarfull,
        profile_url=summary.profileurl,
        country=summary.loccountrycode,
        state=summary.locstatecode,
        visibility=Visibility.from_state(summary.communityvisibilitystate),
        last_logoff=epoch_to_datetime(summary.lastlogoff),
    )


def _unique_by_appid(entries: list[LibraryEntry]) -> list[LibraryEntry]:
    seen: set[int] = set()
    unique: list[LibraryEntry] = []
    for entry in entries:
        if entry.appid in seen:
            continue
        seen.add(entry.appid)
        unique.append(entry)
    return unique


def build_library(owned: GameListPayload | None, recent: GameListPayload | None) -> LibrarySnapshot:
    """Assemble the library snapshot from (possibly missing) game listings."""
    owned_games = _unique_by_appid([map_library_entry(game) for game in (owned.games if owned else [])])
    recent_games = _unique_by_appid(
        [map_library_entry(game, include_two_weeks=True) for game in (recent.games if recent else [])]
    )
    total_minutes = sum(entry.minutes for entry in owned_games)
    never_played = sum(1 for entry in owned_games if entry.minutes == 0)
    top_games = sorted(owned_games, key=lambda entry: entry.minutes, reverse=True)[:TOP_GAMES_LIMIT]
    return LibrarySnapshot(
        total_games=owned.game_count if owned else None,
        total_minutes=total_minutes,
        never_played=never_played,
        top_games=top_games,
        recent_games=recent_games[:RECENT_GAMES_LIMIT],
        all_games=owned_games,
        owned_ids=frozenset(entry.appid for entry in owned_games),
    )


def is_private_snapshot(profile: PlayerProfile | None, library: LibrarySnapshot) -> bool:
    return profile is None or (not library.all_games and library.total_games == 0)


async def aggregate_profile(steam_id: str, connector: SteamWebConnector) -> ProfileSnapshot:
    """Fetch summary, owned games, and recent games concurrently and merge them."""
    steam_id = validate_steam_id(steam_id)
    connector.ensure_configured()

    fetches: list[Callable[[], Awaitable[Any]]] = [
        lambda: connector.get_player_summary(steam_id),
        lambda: connector.get_owned_games(steam_id),
        lambda: connector.get_recently_played(steam_id),
    ]
    pool = BoundedFetchPool(settings.profile_concurrency, name="profile")
    summary_outcome, owned_outcome, recent_outcome = await pool.run(fetches, lambda fetch: fetch())

    for label, outcome in (
        ("summary", summary_outcome),
        ("owned games", owned_outcome),
        ("recent games", recent_outcome),
    ):
        if outcome.missed:
            logger.info("Profile %s fetch degraded to an empty value: %s", label, outcome.error)

    summary: PlayerSummaryPayload | None = summary_outcome.value if summary_outcome.ok else None
    profile = map_player_profile(summary) if summary else None
    library = build_library(
        owned_outcome.value if owned_outcome.ok else None,
        recent_outcome.value if recent_outcome.ok else None,
    )
    return ProfileSnapshot(
        steam_id=steam_id,
        profile=profile,
        is_private=is_private_snapshot(profile, library),
        library=library,
        fetched_at=datetime.now(timezone.utc),
    )
