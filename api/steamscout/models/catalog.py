"""Catalog, enrichment, and recommendation records."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class EnrichedMetadata:
    """Descriptive store metadata for one app id.

    The zero-valued record stands in for any failed or unsuccessful lookup.
    """
    genres: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    price_cents: int | None = None
    discount_pct: int = 0
    released_year: int | None = None

    @property
    def is_empty(self) -> bool:
        return (
            not self.genres
            and not self.categories
            and self.price_cents is None
            and self.discount_pct == 0
            and self.released_year is None
        )


EMPTY_METADATA = EnrichedMetadata()


@dataclass(frozen=True, slots=True)
class CandidateItem:
    """A promoted storefront item that may be recommended."""
    appid: int
    name: str
    header_image: str
    discount_pct: int = 0
    price_cents: int | None = None
    original_price_cents: int | None = None


@dataclass(frozen=True, slots=True)
class TasteProfile:
    """Favorite genres and categories, most weighted first."""
    favorite_genres: tuple[str, ...] = ()
    favorite_categories: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.favorite_genres and not self.favorite_categories


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    """A candidate with its ranking score and the metadata it was scored on."""
    candidate: CandidateItem
    score: float
    enriched: EnrichedMetadata | None = None

    @property
    def appid(self) -> int:
        return self.candidate.appid


@dataclass(slots=True)
class RecommendationResult:
    """Ranked recommendations plus the strategy and taste that produced them."""
    strategy: str
    taste: TasteProfile
    items: list[ScoredCandidate] = field(default_factory=list)
    fallback_reason: str | None = None
