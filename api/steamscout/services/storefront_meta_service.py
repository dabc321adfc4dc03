"""Storefront-wide meta: how many items are discounted and the seasonal sale clock.

Sale windows open and close at the store's 10:00 Pacific rollover. Only the
2025 calendar is published here; other years repeat its dates and are
flagged ``estimated``. Upstream failures degrade the count to ``None``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from steamscout.core.errors import UpstreamError
from steamscout.ingestion.storefront import StorefrontConnector
from steamscout.services.identity_service import normalize_region

logger = logging.getLogger("steamscout.services.storefront_meta")

STORE_TIMEZONE = ZoneInfo("America/Los_Angeles")
ROLLOVER_HOUR = 10
PUBLISHED_YEAR = 2025
# (label, (start month, day), (end month, day)); an end before its start lands next year.
SALE_CALENDAR = (
    ("Spring Sale", (3, 13), (3, 20)),
    ("Summer Sale", (6, 26), (7, 10)),
    ("Autumn Sale", (9, 29), (10, 6)),
    ("Winter Sale", (12, 18), (1, 5)),
)

PHASE_ACTIVE = "active"
PHASE_UPCOMING = "upcoming"


@dataclass(frozen=True, slots=True)
class SaleWindow:
    label: str
    start: datetime
    end: datetime
    estimated: bool = False


@dataclass(frozen=True, slots=True)
class SaleClock:
    """The sale to count down to: the running one's end, else the next one's start."""
    label: str
    phase: str
    target: datetime
    estimated: bool


@dataclass(frozen=True, slots=True)
class StorefrontMeta:
    region: str
    games_on_sale: int | None
    sale: SaleClock
    now: datetime


def _rollover(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, ROLLOVER_HOUR, tzinfo=STORE_TIMEZONE).astimezone(timezone.utc)


def sale_windows(year: int) -> list[SaleWindow]:
    """Windows starting in ``year``, in calendar order."""
    windows: list[SaleWindow] = []
    for label, (start_month, start_day), (end_month, end_day) in SALE_CALENDAR:
        end_year = year + 1 if (end_month, end_day) < (start_month, start_day) else year
        windows.append(
            SaleWindow(
                label=label,
                start=_rollover(year, start_month, start_day),
                end=_rollover(end_year, end_month, end_day),
                estimated=year != PUBLISHED_YEAR,
            )
        )
    return windows


def active_or_next_sale(now: datetime) -> SaleClock:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    windows = [window for year in (now.year - 1, now.year, now.year + 1) for window in sale_windows(year)]
    for window in windows:
        if window.start <= now < window.end:
            return SaleClock(window.label, PHASE_ACTIVE, window.end, window.estimated)
    upcoming = min((window for window in windows if window.start > now), key=lambda window: window.start)
    return SaleClock(upcoming.label, PHASE_UPCOMING, upcoming.start, upcoming.estimated)


async def count_games_on_sale(region: str, store: StorefrontConnector) -> int | None:
    """Search total first, then the size of the featured ``specials`` bucket."""
    try:
        total = await store.get_specials_total(region)
    except UpstreamError as exc:
        logger.info("Specials search unavailable for %s: %s", region, exc)
        total = None
    if total is not None:
        return total

    try:
        buckets = await store.get_featured_buckets(region)
    except UpstreamError as exc:
        logger.warning("Featured specials unavailable for %s: %s", region, exc)
        return None
    specials = buckets.get("specials")
    if specials is None:
        return None
    return len(specials.items or specials.large_capsules)


async def storefront_meta(
    region: str,
    store: StorefrontConnector,
    *,
    now: datetime | None = None,
) -> StorefrontMeta:
    region = normalize_region(region)
    now = now or datetime.now(timezone.utc)
    games_on_sale = await count_games_on_sale(region, store)
    return StorefrontMeta(
        region=region,
        games_on_sale=games_on_sale,
        sale=active_or_next_sale(now),
        now=now,
    )
