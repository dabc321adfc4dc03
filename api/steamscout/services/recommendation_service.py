"""Recommendation pipeline: exclude owned, enrich, infer taste, score or fall back.

Invariants:
- Owned app ids never appear in the output.
- The fallback ranker answers whenever scoring cannot (no usable enrichment,
  nothing survives the pre-filter, or scoring raises).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from steamscout.core.config import settings
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.ingestion.storefront import StorefrontConnector
from steamscout.models.catalog import (
    EMPTY_METADATA,
    CandidateItem,
    EnrichedMetadata,
    RecommendationResult,
    TasteProfile,
)
from steamscout.models.library import ProfileSnapshot
from steamscout.services import catalog_service, enrichment_service, profile_service
from steamscout.services.identity_service import normalize_region, validate_steam_id
from steamscout.services.ranking import fallback_rank, score_candidates
from steamscout.services.taste_profile_service import infer_taste

logger = logging.getLogger("steamscout.services.recommendations")

STRATEGY_SCORED = "scored"
STRATEGY_FALLBACK = "fallback"


def _taste_sample_ids(snapshot: ProfileSnapshot) -> list[int]:
    ranked = sorted(snapshot.library.all_games, key=lambda entry: entry.minutes, reverse=True)
    return [entry.appid for entry in ranked[: settings.taste_library_limit]]


def _enrichment_unavailable(candidates: list[CandidateItem], enrichment: dict[int, EnrichedMetadata]) -> bool:
    return all(
        enrichment.get(candidate.appid, EMPTY_METADATA).is_empty for candidate in candidates
    )


async def recommend(
    snapshot: ProfileSnapshot,
    candidates: list[CandidateItem],
    store_connector: StorefrontConnector,
    *,
    taste: TasteProfile | None = None,
    limit: int | None = None,
    reference_year: int | None = None,
    region: str | None = None,
) -> RecommendationResult:
    """Rank unowned candidates against the user's taste."""
    limit = limit or settings.recommendation_limit
    reference_year = reference_year or datetime.now(timezone.utc).year
    library = snapshot.library
    unowned = [candidate for candidate in candidates if not library.owns(candidate.appid)]
    explicit_taste = taste if taste is not None and not taste.is_empty else None
    if not unowned:
        return RecommendationResult(
            strategy=STRATEGY_FALLBACK,
            taste=explicit_taste or TasteProfile(),
            items=[],
            fallback_reason="no_candidates",
        )

    taste_ids = [] if explicit_taste else _taste_sample_ids(snapshot)
    enrichment = await enrichment_service.enrich(
        [candidate.appid for candidate in unowned] + taste_ids, store_connector, region=region
    )
    resolved_taste = explicit_taste or infer_taste(library.all_games, enrichment)

    fallback_reason: str | None = None
    ranked = []
    if _enrichment_unavailable(unowned, enrichment):
        fallback_reason = "enrichment_unavailable"
    else:
        try:
            ranked = score_candidates(
                unowned,
                enrichment,
                resolved_taste,
                reference_year,
                playtime=library.playtime(),
                limit=limit,
            )
        except Exception:  # noqa: BLE001
            logger.exception("Scoring failed; using the discount fallback")
            fallback_reason = "scoring_failed"
        else:
            if not ranked:
                fallback_reason = "no_survivors"

    if fallback_reason:
        logger.info("Recommendations for %s fell back: %s", snapshot.steam_id, fallback_reason)
        ranked = fallback_rank(unowned, enrichment=enrichment, limit=limit)
    items = [item for item in ranked if not library.owns(item.appid)]
    return RecommendationResult(
        strategy=STRATEGY_FALLBACK if fallback_reason else STRATEGY_SCORED,
        taste=resolved_taste,
        items=items,
        fallback_reason=fallback_reason,
    )


async def build_recommendations(
    steam_id: str,
    region: str,
    web_connector: SteamWebConnector,
    store_connector: StorefrontConnector,
    *,
    taste: TasteProfile | None = None,
    limit: int | None = None,
) -> tuple[ProfileSnapshot, RecommendationResult]:
    """Aggregate the profile and sample the catalog concurrently, then rank."""
    steam_id = validate_steam_id(steam_id)
    region = normalize_region(region)
    web_connector.ensure_configured()
    snapshot, candidates = await asyncio.gather(
        profile_service.aggregate_profile(steam_id, web_connector),
        catalog_service.sample_catalog(region, store_connector),
    )
    result = await recommend(
        snapshot, candidates, store_connector, taste=taste, limit=limit, region=region
    )
    return snapshot, result
