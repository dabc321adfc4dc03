"""Per-app metadata enrichment (genres, categories, price, release year).

Invariants:
- The returned map has exactly one entry per distinct requested id.
- Any failure, or an unsuccessful store entry, maps to ``EMPTY_METADATA``.
"""

from __future__ import annotations

import logging
from typing import Iterable

from steamscout.core.config import settings
from steamscout.ingestion.payloads import AppDetailsPayload, DescriptorPayload
from steamscout.ingestion.storefront import ENRICHMENT_FILTERS, StorefrontConnector
from steamscout.models.catalog import EMPTY_METADATA, EnrichedMetadata
from steamscout.services.fetch_pool import BoundedFetchPool
from steamscout.utils.datetime import parse_release_year

logger = logging.getLogger("steamscout.services.enrichment")


def _descriptions(entries: list[DescriptorPayload]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(entry.description for entry in entries if entry.description))


def metadata_from_details(details: AppDetailsPayload) -> EnrichedMetadata:
    """Map an ``appdetails`` entry to enrichment, zero-valued when unsuccessful."""
    if not details.success or details.data is None:
        return EMPTY_METADATA
    data = details.data
    overview = data.price_overview
    return EnrichedMetadata(
        genres=_descriptions(data.genres),
        categories=_descriptions(data.categories),
        price_cents=overview.final if overview else None,
        discount_pct=max(0, min(100, overview.discount_percent)) if overview else 0,
        released_year=parse_release_year(data.release_date.date if data.release_date else None),
    )


async def enrich(
    appids: Iterable[int],
    connector: StorefrontConnector,
    *,
    region: str | None = None,
    concurrency: int | None = None,
) -> dict[int, EnrichedMetadata]:
    """Fetch enrichment for every id; the result is total over the input ids."""
    unique_ids = list(dict.fromkeys(appids))
    if not unique_ids:
        return {}

    async def _fetch(appid: int) -> EnrichedMetadata:
        details = await connector.get_app_details(appid, region=region, filters=ENRICHMENT_FILTERS)
        return metadata_from_details(details)

    pool = BoundedFetchPool(concurrency or settings.enrichment_concurrency, name="enrichment")
    outcomes = await pool.run(unique_ids, _fetch)
    enriched: dict[int, EnrichedMetadata] = {}
    misses = 0
    for appid, outcome in zip(unique_ids, outcomes):
        if outcome.ok and outcome.value is not None:
            enriched[appid] = outcome.value
        else:
            misses += 1
            enriched[appid] = EMPTY_METADATA
    if misses:
        logger.info("Enrichment fell back to empty metadata for %d of %d apps", misses, len(unique_ids))
    return enriched
