"""Steam storefront connector for featured lists and per-app details."""

from __future__ import annotations

from typing import Any, Iterable

import httpx
from pydantic import ValidationError as PayloadValidationError

from steamscout.core.config import settings
from steamscout.core.errors import UpstreamError
from steamscout.ingestion.base import BaseConnector
from steamscout.ingestion.observability import FetchMonitor
from steamscout.ingestion.payloads import AppDetailsPayload, FeaturedBucketPayload

ENRICHMENT_FILTERS = ("categories", "genres", "release_date", "price_overview")
PRICE_FILTERS = ("price_overview",)
# The search endpoint only answers JSON to XHR-style requests.
SEARCH_HEADERS = {
    "Accept": "application/json,text/plain,*/*",
    "X-Requested-With": "XMLHttpRequest",
    "Referer": "https://store.steampowered.com/search/?specials=1",
}


class StorefrontConnector(BaseConnector):
    """Unauthenticated ``store.steampowered.com/api`` endpoints."""
    source_name = "steam_store"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str | None = None,
        language: str = "en",
        monitor: FetchMonitor | None = None,
    ) -> None:
        super().__init__(client, monitor=monitor)
        self.base_url = (base_url or settings.steam_store_base).rstrip("/")
        self.language = language

    async def get_featured_buckets(self, region: str) -> dict[str, FeaturedBucketPayload]:
        """Return every promotional bucket of ``featuredcategories`` keyed by name."""
        payload = await self._get_json(
            "featured_categories",
            f"{self.base_url}/api/featuredcategories/",
            params={"l": self.language, "cc": region},
            context={"cc": region},
        )
        if not isinstance(payload, dict):
            raise UpstreamError("featuredcategories returned a non-object payload", kind="upstream_payload")
        buckets: dict[str, FeaturedBucketPayload] = {}
        for name, raw in payload.items():
            if not isinstance(raw, dict):
                continue
            try:
                buckets[name] = FeaturedBucketPayload.model_validate(raw)
            except PayloadValidationError:
                continue
        return buckets

    async def get_specials_total(self, region: str) -> int | None:
        """Return the store-wide count of discounted items, None when unreported."""
        payload = await self._get_json(
            "specials_total",
            f"{self.base_url}/search/results/",
            params={
                "query": "",
                "specials": 1,
                "start": 0,
                "count": 1,
                "cc": region,
                "l": self.language,
                "json": 1,
                "infinite": 1,
            },
            headers=SEARCH_HEADERS,
            context={"cc": region},
        )
        if not isinstance(payload, dict):
            return None
        total = payload.get("total_count")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            return None
        return total

    async def get_app_details(
        self,
        appid: int,
        *,
        region: str | None = None,
        filters: Iterable[str] = ENRICHMENT_FILTERS,
    ) -> AppDetailsPayload:
        """Return the ``appdetails`` entry for a single app id.

        An unsuccessful entry is returned as-is (``success`` false); callers
        decide how to degrade. Transport and envelope problems raise.
        """
        params: dict[str, Any] = {"appids": appid, "filters": ",".join(filters)}
        if region:
            params["cc"] = region
        payload = await self._get_json(
            "app_details",
            f"{self.base_url}/api/appdetails",
            params=params,
            context={"appid": appid, "cc": region},
        )
        if not isinstance(payload, dict):
            raise UpstreamError("appdetails returned a non-object payload", kind="upstream_payload")
        entry = payload.get(str(appid))
        if entry is None:
            raise UpstreamError(f"appdetails omitted app {appid}", kind="upstream_payload")
        try:
            return AppDetailsPayload.model_validate(entry)
        except PayloadValidationError as exc:
            raise UpstreamError(f"appdetails entry for {appid} was malformed", kind="upstream_payload") from exc
