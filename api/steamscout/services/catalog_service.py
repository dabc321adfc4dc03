"""Candidate pool sampling from the storefront's promotional lists."""

from __future__ import annotations

import logging
from typing import Iterable

from steamscout.core.config import settings
from steamscout.core.errors import UpstreamError
from steamscout.ingestion.payloads import FeaturedBucketPayload, FeaturedItemPayload, validate_items
from steamscout.ingestion.storefront import StorefrontConnector
from steamscout.models.catalog import CandidateItem
from steamscout.services.identity_service import normalize_region
from steamscout.services.profile_service import header_image_url

logger = logging.getLogger("steamscout.services.catalog")

FEATURED_BUCKETS = (
    "top_sellers",
    "specials",
    "trending_new_releases",
    "popular_new_releases",
    "coming_soon",
)


def map_candidate(item: FeaturedItemPayload) -> CandidateItem:
    return CandidateItem(
        appid=item.id,
        name=item.name or "Unknown",
        header_image=item.header_image or header_image_url(item.id),
        discount_pct=item.discount_percent,
        price_cents=item.final_price,
        original_price_cents=item.original_price,
    )


def dedupe_candidates(candidates: Iterable[CandidateItem]) -> list[CandidateItem]:
    """Keep the first occurrence of every app id, preserving order."""
    seen: set[int] = set()
    unique: list[CandidateItem] = []
    for candidate in candidates:
        if candidate.appid in seen:
            continue
        seen.add(candidate.appid)
        unique.append(candidate)
    return unique


def flatten_buckets(buckets: dict[str, FeaturedBucketPayload]) -> list[CandidateItem]:
    """Flatten the known buckets in their fixed order."""
    flattened: list[CandidateItem] = []
    for name in FEATURED_BUCKETS:
        bucket = buckets.get(name)
        if bucket is None:
            continue
        items = validate_items(FeaturedItemPayload, bucket.items, source=f"featured:{name}")
        flattened.extend(map_candidate(item) for item in items)
    return flattened


async def sample_catalog(
    region: str,
    connector: StorefrontConnector,
    *,
    limit: int | None = None,
) -> list[CandidateItem]:
    """Return de-duplicated promoted items for ``region``; empty on upstream failure."""
    region = normalize_region(region)
    try:
        buckets = await connector.get_featured_buckets(region)
    except UpstreamError as exc:
        logger.warning("Catalog sample for %s unavailable: %s", region, exc)
        return []
    candidates = dedupe_candidates(flatten_buckets(buckets))
    return candidates[: limit or settings.catalog_max_candidates]
