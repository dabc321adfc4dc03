"""Taste profile inference from the user's own playtime."""

from __future__ import annotations

from typing import Iterable, Mapping

from steamscout.models.catalog import EnrichedMetadata, TasteProfile
from steamscout.models.library import LibraryEntry

DEFAULT_GENRE_LIMIT = 8
DEFAULT_CATEGORY_LIMIT = 6


def _top_weighted(weights: dict[str, int], limit: int) -> tuple[str, ...]:
    # dicts keep first-seen order and sorted() is stable, so ties stay in that order.
    ranked = sorted(weights.items(), key=lambda item: item[1], reverse=True)
    return tuple(name for name, _ in ranked[:limit])


def infer_taste(
    library: Iterable[LibraryEntry],
    enrichment: Mapping[int, EnrichedMetadata],
    *,
    genre_limit: int = DEFAULT_GENRE_LIMIT,
    category_limit: int = DEFAULT_CATEGORY_LIMIT,
) -> TasteProfile:
    """Weight each genre and category by lifetime minutes across enriched apps."""
    genre_weights: dict[str, int] = {}
    category_weights: dict[str, int] = {}
    for entry in library:
        metadata = enrichment.get(entry.appid)
        if metadata is None:
            continue
        for genre in metadata.genres:
            genre_weights[genre] = genre_weights.get(genre, 0) + entry.minutes
        for category in metadata.categories:
            category_weights[category] = category_weights.get(category, 0) + entry.minutes
    return TasteProfile(
        favorite_genres=_top_weighted(genre_weights, genre_limit),
        favorite_categories=_top_weighted(category_weights, category_limit),
    )


def taste_from_preferences(
    favorite_genres: Iterable[str] | None,
    favorite_categories: Iterable[str] | None,
) -> TasteProfile | None:
    """Build an explicit taste profile, or None when no preference was given."""
    genres = tuple(dict.fromkeys(g.strip() for g in favorite_genres or () if g and g.strip()))
    categories = tuple(dict.fromkeys(c.strip() for c in favorite_categories or () if c and c.strip()))
    if not genres and not categories:
        return None
    return TasteProfile(favorite_genres=genres, favorite_categories=categories)
