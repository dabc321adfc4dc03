"""Library and player records produced by profile aggregation."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


class Visibility(int, enum.Enum):
    """Community visibility states reported by the player summary."""
    PRIVATE = 1
    FRIENDS_ONLY = 2
    PUBLIC = 3

    @classmethod
    def from_state(cls, value: int | None) -> Visibility:
        """Unknown or missing states are treated as private."""
        try:
            return cls(value)
        except ValueError:
            return cls.PRIVATE


@dataclass(slots=True)
class LibraryEntry:
    """One owned (or recently played) app with its playtime."""
    appid: int
    name: str
    header_image: str
    minutes: int = 0
    minutes_2weeks: int | None = None
    last_played_at: datetime | None = None
    logo_url: str | None = None

    @property
    def hours(self) -> float:
        return round(self.minutes / 60, 1)

    @property
    def hours_2weeks(self) -> float | None:
        if self.minutes_2weeks is None:
            return None
        return round(self.minutes_2weeks / 60, 1)


@dataclass(slots=True)
class PlayerProfile:
    """Public persona details; absent when the account is unknown or hidden."""
    persona_name: str
    avatar: str | None
    profile_url: str | None
    country: str | None
    visibility: Visibility
    state: str | None = None
    last_logoff: datetime | None = None


@dataclass(slots=True)
class LibrarySnapshot:
    """The owned library as seen by a single aggregation run."""
    total_games: int | None
    total_minutes: int
    never_played: int
    top_games: list[LibraryEntry] = field(default_factory=list)
    recent_games: list[LibraryEntry] = field(default_factory=list)
    all_games: list[LibraryEntry] = field(default_factory=list)
    owned_ids: frozenset[int] = frozenset()

    def owns(self, appid: int) -> bool:
        return appid in self.owned_ids

    def playtime(self) -> dict[int, tuple[int, int | None]]:
        """Map app id to ``(lifetime, last two weeks)`` minutes.

        Recently played entries are authoritative for the two-week figure.
        """
        minutes: dict[int, tuple[int, int | None]] = {
            entry.appid: (entry.minutes, entry.minutes_2weeks) for entry in self.all_games
        }
        for entry in self.recent_games:
            lifetime, _ = minutes.get(entry.appid, (entry.minutes, None))
            minutes[entry.appid] = (max(lifetime, entry.minutes), entry.minutes_2weeks)
        return minutes


@dataclass(slots=True)
class ProfileSnapshot:
    """Result of aggregating summary, owned games, and recent games."""
    steam_id: str
    profile: PlayerProfile | None
    is_private: bool
    library: LibrarySnapshot
    fetched_at: datetime
