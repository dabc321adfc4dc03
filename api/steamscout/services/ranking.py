"""
Recommendation scoring and ranking.

Score formula (weighted sum, floored at 0)
------------------------------------------
    total = (
        recent_engagement     * 0.30   # min(1, last-two-weeks minutes / 20h)
        + lifetime_engagement * 0.25   # min(1, lifetime minutes / 200h)
        + genre_affinity      * 0.20   # matched favorite genres / max(1, favorites)
        + category_affinity   * 0.10   # same over favorite categories
        + discount            * 0.12   # discount percent / 100
        + newness             * 0.08   # 1 - min(1, age / 12y); 0.5 when unknown
        - price_penalty                # up to 0.2 once the price passes 40
    )

Pre-filter (a candidate is dropped when any holds)
--------------------------------------------------
    - name or header image missing
    - released more than 12 years before the reference year, with no
      last-two-weeks playtime and a discount below 40%
    - categories include Demo, SteamVR Tool or Application

Fallback ordering
-----------------
    discount desc, then price asc (unknown price last), then name.
    Synthetic score = 0.5 * (limit - position) / limit + 0.5 * discount / 100,
    which never increases down the list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from steamscout.models.catalog import CandidateItem, EnrichedMetadata, ScoredCandidate, TasteProfile

RECENT_MINUTES_CAP = 20 * 60
LIFETIME_MINUTES_CAP = 200 * 60
MAX_AGE_YEARS = 12
RESCUE_DISCOUNT_PCT = 40
EXCLUDED_CATEGORIES = frozenset({"Demo", "SteamVR Tool", "Application"})
PRICE_PENALTY_THRESHOLD = 40.0
PRICE_PENALTY_SCALE = 200.0
PRICE_PENALTY_CAP = 0.2
UNKNOWN_NEWNESS = 0.5
DEFAULT_LIMIT = 60
FALLBACK_POSITION_WEIGHT = 0.5
FALLBACK_DISCOUNT_WEIGHT = 0.5

WEIGHT_RECENT = 0.30
WEIGHT_LIFETIME = 0.25
WEIGHT_GENRE = 0.20
WEIGHT_CATEGORY = 0.10
WEIGHT_DISCOUNT = 0.12
WEIGHT_NEWNESS = 0.08

Playtime = Mapping[int, tuple[int, int | None]]


@dataclass
class ScoreComponents:
    """Normalized score terms for one candidate.

    Attributes:
        recent_engagement:   0–1, last-two-weeks minutes against a 20h cap.
        lifetime_engagement: 0–1, lifetime minutes against a 200h cap.
        genre_affinity:      0–1, share of favorite genres the item carries.
        category_affinity:   0–1, share of favorite categories the item carries.
        discount:            0–1, discount percent / 100.
        newness:             0–1, linear decay over twelve years.
        price_penalty:       0–0.2, subtracted unweighted.
    """

    recent_engagement: float
    lifetime_engagement: float
    genre_affinity: float
    category_affinity: float
    discount: float
    newness: float
    price_penalty: float

    @property
    def total(self) -> float:
        """Weighted total, never below zero."""
        raw = (
            self.recent_engagement * WEIGHT_RECENT
            + self.lifetime_engagement * WEIGHT_LIFETIME
            + self.genre_affinity * WEIGHT_GENRE
            + self.category_affinity * WEIGHT_CATEGORY
            + self.discount * WEIGHT_DISCOUNT
            + self.newness * WEIGHT_NEWNESS
            - self.price_penalty
        )
        return max(0.0, raw)


def _affinity(favorites: tuple[str, ...], present: Iterable[str]) -> float:
    present_set = set(present)
    matched = sum(1 for favorite in favorites if favorite in present_set)
    return min(1.0, matched / max(1, len(favorites)))


def passes_prefilter(
    candidate: CandidateItem,
    metadata: EnrichedMetadata | None,
    reference_year: int,
    *,
    recent_minutes: int = 0,
) -> bool:
    """Return False for unusable, stale-and-unrescued, or non-game items."""
    if not candidate.name or not candidate.header_image:
        return False
    released = metadata.released_year if metadata else None
    old = released is not None and reference_year - released > MAX_AGE_YEARS
    has_recent = recent_minutes > 0
    big_sale = (metadata.discount_pct if metadata else 0) >= RESCUE_DISCOUNT_PCT
    if old and not has_recent and not big_sale:
        return False
    categories = set(metadata.categories) if metadata else set()
    return categories.isdisjoint(EXCLUDED_CATEGORIES)


def compute_components(
    metadata: EnrichedMetadata | None,
    taste: TasteProfile,
    reference_year: int,
    *,
    minutes: int = 0,
    recent_minutes: int = 0,
) -> ScoreComponents:
    """Compute every score term for a candidate."""
    genre_affinity = 0.0
    category_affinity = 0.0
    discount = 0.0
    newness = UNKNOWN_NEWNESS
    price_penalty = 0.0
    if metadata is not None:
        genre_affinity = _affinity(taste.favorite_genres, metadata.genres)
        category_affinity = _affinity(taste.favorite_categories, metadata.categories)
        discount = max(0, min(100, metadata.discount_pct)) / 100
        if metadata.released_year:
            age = max(0, reference_year - metadata.released_year)
            newness = 1 - min(1.0, age / MAX_AGE_YEARS)
        if metadata.price_cents is not None:
            major_units = metadata.price_cents / 100
            price_penalty = min(
                PRICE_PENALTY_CAP, max(0.0, (major_units - PRICE_PENALTY_THRESHOLD) / PRICE_PENALTY_SCALE)
            )
    return ScoreComponents(
        recent_engagement=min(1.0, max(0, recent_minutes) / RECENT_MINUTES_CAP),
        lifetime_engagement=min(1.0, max(0, minutes) / LIFETIME_MINUTES_CAP),
        genre_affinity=genre_affinity,
        category_affinity=category_affinity,
        discount=discount,
        newness=newness,
        price_penalty=price_penalty,
    )


def score_candidates(
    candidates: Iterable[CandidateItem],
    enrichment: Mapping[int, EnrichedMetadata],
    taste: TasteProfile,
    reference_year: int,
    *,
    playtime: Playtime | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[ScoredCandidate]:
    """Filter, score and rank candidates; pure and deterministic.

    Equal scores keep their input order (the sort is stable).
    """
    playtime = playtime or {}
    scored: list[ScoredCandidate] = []
    for candidate in candidates:
        metadata = enrichment.get(candidate.appid)
        minutes, recent = playtime.get(candidate.appid, (0, None))
        recent_minutes = recent or 0
        if not passes_prefilter(candidate, metadata, reference_year, recent_minutes=recent_minutes):
            continue
        components = compute_components(
            metadata, taste, reference_year, minutes=minutes, recent_minutes=recent_minutes
        )
        scored.append(ScoredCandidate(candidate=candidate, score=components.total, enriched=metadata))
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored[:limit]


def _fallback_key(candidate: CandidateItem) -> tuple[int, float, str, str]:
    price = candidate.price_cents if candidate.price_cents is not None else float("inf")
    return (-candidate.discount_pct, price, candidate.name.casefold(), candidate.name)


def fallback_rank(
    candidates: Iterable[CandidateItem],
    *,
    enrichment: Mapping[int, EnrichedMetadata] | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[ScoredCandidate]:
    """Order by discount, price and name with a synthetic, rank-derived score.

    Zero-valued enrichment records are reported as missing (``enriched=None``).
    """
    ordered = sorted(candidates, key=_fallback_key)[:limit]
    slots = max(1, limit)
    enrichment = enrichment or {}
    ranked: list[ScoredCandidate] = []
    for position, candidate in enumerate(ordered):
        discount = max(0, min(100, candidate.discount_pct)) / 100
        score = (
            FALLBACK_POSITION_WEIGHT * (slots - position) / slots
            + FALLBACK_DISCOUNT_WEIGHT * discount
        )
        metadata = enrichment.get(candidate.appid)
        ranked.append(
            ScoredCandidate(
                candidate=candidate,
                score=max(0.0, score),
                enriched=metadata if metadata is not None and not metadata.is_empty else None,
            )
        )
    return ranked
