"""Request and response schemas for the Steam library routes."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from pydantic import BaseModel, Field, field_validator

from steamscout.models.catalog import ScoredCandidate
from steamscout.models.library import Visibility
from steamscout.schema.base import ORMModel
from steamscout.services.storefront_meta_service import StorefrontMeta


class LibraryEntryRead(ORMModel):
    appid: int
    name: str
    header_image: str
    minutes: int
    minutes_2weeks: int | None = None
    hours: float
    hours_2weeks: float | None = None
    last_played_at: datetime | None = None
    logo_url: str | None = None


class PlayerProfileRead(ORMModel):
    persona_name: str
    avatar: str | None = None
    profile_url: str | None = None
    country: str | None = None
    state: str | None = None
    visibility: Visibility
    last_logoff: datetime | None = None


class LibraryRead(ORMModel):
    """Library summary plus the full owned list and its ids (ascending)."""
    total_games: int | None = None
    total_minutes: int
    never_played: int
    top_games: list[LibraryEntryRead] = Field(default_factory=list)
    recent_games: list[LibraryEntryRead] = Field(default_factory=list)
    all_games: list[LibraryEntryRead] = Field(default_factory=list)
    owned_ids: list[int] = Field(default_factory=list)

    @field_validator("owned_ids", mode="before")
    @classmethod
    def _sorted_ids(cls, value: Iterable[int]) -> list[int]:
        return sorted(value)


class ProfileRead(ORMModel):
    steam_id: str
    profile: PlayerProfileRead | None = None
    is_private: bool
    library: LibraryRead
    fetched_at: datetime


class ValuationRead(ORMModel):
    steam_id: str
    value: float
    currency_code: str
    currency: str
    region: str
    counted: int
    missed: int
    owned: int


class CandidateRead(ORMModel):
    appid: int
    name: str
    header_image: str
    discount_pct: int = 0
    price_cents: int | None = None
    original_price_cents: int | None = None


class CatalogRead(BaseModel):
    region: str
    items: list[CandidateRead] = Field(default_factory=list)


class EnrichedRead(ORMModel):
    genres: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    price_cents: int | None = None
    discount_pct: int = 0
    released_year: int | None = None


class EnrichRequest(BaseModel):
    """Payload for a batch enrichment lookup."""
    appids: list[int] = Field(min_length=1)
    cc: str | None = None

    @field_validator("appids")
    @classmethod
    def _positive_ids(cls, value: list[int]) -> list[int]:
        if any(appid <= 0 for appid in value):
            raise ValueError("app ids must be positive integers")
        return value


class EnrichRead(BaseModel):
    # JSON object keys are strings; ids keep their request order.
    items: dict[str, EnrichedRead] = Field(default_factory=dict)


class TasteRead(ORMModel):
    favorite_genres: list[str] = Field(default_factory=list)
    favorite_categories: list[str] = Field(default_factory=list)


class RecommendationItem(BaseModel):
    appid: int
    name: str
    header_image: str
    score: float
    discount_pct: int = 0
    price_cents: int | None = None
    original_price_cents: int | None = None
    enriched: EnrichedRead | None = None

    @classmethod
    def from_scored(cls, scored: ScoredCandidate) -> "RecommendationItem":
        candidate = scored.candidate
        return cls(
            appid=candidate.appid,
            name=candidate.name,
            header_image=candidate.header_image,
            score=round(scored.score, 6),
            discount_pct=candidate.discount_pct,
            price_cents=candidate.price_cents,
            original_price_cents=candidate.original_price_cents,
            enriched=EnrichedRead.model_validate(scored.enriched) if scored.enriched is not None else None,
        )


class RecommendationRead(BaseModel):
    steam_id: str
    region: str
    strategy: str
    fallback_reason: str | None = None
    is_private: bool
    taste: TasteRead
    items: list[RecommendationItem] = Field(default_factory=list)


class MetaRead(BaseModel):
    """Discounted-item count plus the sale countdown target."""
    region: str
    games_on_sale: int | None = None
    sale_label: str
    phase: str
    sale_target_at: datetime
    estimated: bool = False
    now: datetime

    @classmethod
    def from_meta(cls, meta: StorefrontMeta) -> "MetaRead":
        return cls(
            region=meta.region,
            games_on_sale=meta.games_on_sale,
            sale_label=meta.sale.label,
            phase=meta.sale.phase,
            sale_target_at=meta.sale.target,
            estimated=meta.sale.estimated,
            now=meta.now,
        )


class RecommendationRequest(BaseModel):
    """Explicit-taste recommendation request."""
    steam_id: str
    cc: str | None = None
    favorite_genres: list[str] | None = None
    favorite_categories: list[str] | None = None
    limit: int | None = Field(default=None, ge=1)


class IdentityResolveRequest(BaseModel):
    input: str = Field(min_length=1)


class IdentityResolveRead(BaseModel):
    steam_id: str
