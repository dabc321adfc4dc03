"""Validated records for Steam Web API and storefront payloads.

Every field has a default so that missing keys fail closed to empty/zero
values instead of leaking ``None`` lookups into the services.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Iterable, TypeVar

from pydantic import BaseModel, BeforeValidator, Field, StrictInt, ValidationError, field_validator

logger = logging.getLogger("steamscout.ingestion.payloads")

ModelT = TypeVar("ModelT", bound=BaseModel)


class UpstreamPayload(BaseModel):
    """Base for upstream records; unknown keys are ignored."""

    model_config = {"extra": "ignore"}


def _zero_if_missing(value: Any) -> Any:
    return 0 if value is None else value


# Upstream sends explicit nulls for some counters; those read as 0.
ZeroDefaultInt = Annotated[int, BeforeValidator(_zero_if_missing)]


class PlayerSummaryPayload(UpstreamPayload):
    """Entry of ``GetPlayerSummaries`` ``response.players``."""
    steamid: str = ""
    personaname: str = ""
    avatarfull: str | None = None
    profileurl: str | None = None
    loccountrycode: str | None = None
    locstatecode: str | None = None
    communityvisibilitystate: int | None = None
    lastlogoff: int | None = None


class OwnedGamePayload(UpstreamPayload):
    """Entry of ``GetOwnedGames`` / ``GetRecentlyPlayedGames`` game lists."""
    appid: StrictInt = Field(gt=0)
    name: str = ""
    playtime_forever: ZeroDefaultInt = Field(default=0, ge=0)
    playtime_2weeks: int | None = Field(default=None, ge=0)
    img_logo_url: str | None = None
    rtime_last_played: int | None = None


class GameListPayload(UpstreamPayload):
    """``response`` envelope of the owned/recent game endpoints."""
    games: list[Any] = Field(default_factory=list)
    game_count: int | None = None
    total_count: int | None = None

    @field_validator("games", mode="before")
    @classmethod
    def _coerce_games(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []


class VanityResolutionPayload(UpstreamPayload):
    """``response`` envelope of ``ResolveVanityURL``; success is 1 on a match."""
    success: int = 0
    steamid: str | None = None


class FeaturedItemPayload(UpstreamPayload):
    """Item of a ``featuredcategories`` bucket."""
    id: StrictInt = Field(gt=0)
    name: str | None = None
    header_image: str | None = None
    discount_percent: ZeroDefaultInt = 0
    final_price: int | None = None
    original_price: int | None = None


class FeaturedBucketPayload(UpstreamPayload):
    items: list[Any] = Field(default_factory=list)
    large_capsules: list[Any] = Field(default_factory=list)

    @field_validator("items", "large_capsules", mode="before")
    @classmethod
    def _coerce_items(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []


class DescriptorPayload(UpstreamPayload):
    description: str = ""

    @field_validator("description", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()


class PriceOverviewPayload(UpstreamPayload):
    currency: str | None = None
    initial: int | None = None
    final: int | None = None
    discount_percent: ZeroDefaultInt = 0


class ReleaseDatePayload(UpstreamPayload):
    coming_soon: bool = False
    date: str | None = None


class AppDetailsData(UpstreamPayload):
    genres: list[DescriptorPayload] = Field(default_factory=list)
    categories: list[DescriptorPayload] = Field(default_factory=list)
    price_overview: PriceOverviewPayload | None = None
    release_date: ReleaseDatePayload | None = None


class AppDetailsPayload(UpstreamPayload):
    """Per-app entry of ``appdetails`` keyed by the app id."""
    success: bool = False
    data: AppDetailsData | None = None

    @field_validator("data", mode="before")
    @classmethod
    def _empty_data(cls, value: Any) -> Any:
        # Filtered lookups on free titles come back as ``"data": []``.
        if isinstance(value, list):
            return None
        return value


def validate_items(model: type[ModelT], raw_items: Iterable[Any], *, source: str) -> list[ModelT]:
    """Validate list entries one by one, dropping malformed ones."""
    items: list[ModelT] = []
    skipped = 0
    for raw in raw_items:
        try:
            items.append(model.model_validate(raw))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.info("Skipped %d malformed %s entries from %s", skipped, model.__name__, source)
    return items
