"""Library valuation from current regional store prices.

Invariants:
- ``counted + missed == owned``; a missing price is a miss, never an error.
- The currency is taken from the first priced app in library order and is
  assumed to hold for the whole batch (not re-checked per item).
- Rounding (half-to-even, two places) happens once, on the final total.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Mapping

from steamscout.core.config import settings
from steamscout.core.errors import ValidationError
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.ingestion.storefront import PRICE_FILTERS, StorefrontConnector
from steamscout.models.valuation import ValuationResult
from steamscout.services.fetch_pool import BoundedFetchPool
from steamscout.services.identity_service import normalize_region, validate_steam_id

logger = logging.getLogger("steamscout.services.valuation")

CENT = Decimal("0.01")
DEFAULT_CURRENCY = "USD"
CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}
_EURO_REGIONS = (
    "AT", "BE", "CY", "DE", "EE", "ES", "FI", "FR", "GR", "HR", "IE", "IT",
    "LT", "LU", "LV", "MT", "NL", "PT", "SI", "SK",
)
REGION_CURRENCIES = {
    "US": "USD",
    "IN": "INR",
    "GB": "GBP",
    "JP": "JPY",
    **{region: "EUR" for region in _EURO_REGIONS},
}


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """Final price of one app in minor units."""
    cents: int
    currency_code: str | None


def currency_symbol(code: str) -> str:
    return CURRENCY_SYMBOLS.get(code, code)


def resolve_region(explicit: str | None, headers: Mapping[str, str] | None = None) -> str:
    """Pick the pricing region: explicit value, then geolocation header, then default."""
    if explicit is not None and explicit.strip():
        return normalize_region(explicit)
    for header in settings.geo_country_headers:
        value = (headers or {}).get(header)
        if value and value.strip():
            try:
                return normalize_region(value)
            except ValidationError:
                continue
    return settings.default_region


def total_value(quotes: list[PriceQuote]) -> Decimal:
    """Sum minor units and convert to major units with a single rounding step."""
    cents = sum(quote.cents for quote in quotes)
    return (Decimal(cents) / 100).quantize(CENT, rounding=ROUND_HALF_EVEN)


async def fetch_price(connector: StorefrontConnector, appid: int, region: str) -> PriceQuote | None:
    """Return the current final price, or None for free/delisted/unavailable apps."""
    details = await connector.get_app_details(appid, region=region, filters=PRICE_FILTERS)
    if not details.success or details.data is None or details.data.price_overview is None:
        return None
    overview = details.data.price_overview
    if overview.final is None:
        return None
    return PriceQuote(cents=overview.final, currency_code=overview.currency)


async def estimate_value(
    steam_id: str,
    region: str,
    web_connector: SteamWebConnector,
    store_connector: StorefrontConnector,
) -> ValuationResult:
    """Estimate the current store value of every owned app in ``region``."""
    steam_id = validate_steam_id(steam_id)
    region = normalize_region(region)
    owned = await web_connector.get_owned_games(steam_id)
    appids = list(dict.fromkeys(game.appid for game in owned.games))
    fallback_currency = REGION_CURRENCIES.get(region, DEFAULT_CURRENCY)
    if not appids:
        return ValuationResult(
            value=Decimal("0.00"),
            currency_code=fallback_currency,
            currency=currency_symbol(fallback_currency),
            region=region,
            counted=0,
            missed=0,
            owned=0,
        )

    pool = BoundedFetchPool(settings.valuation_concurrency, name="valuation")
    outcomes = await pool.run(appids, lambda appid: fetch_price(store_connector, appid, region))
    quotes = [outcome.value for outcome in outcomes if outcome.ok and outcome.value is not None]
    currency_code = next((quote.currency_code for quote in quotes if quote.currency_code), fallback_currency)
    counted = len(quotes)
    missed = len(appids) - counted
    logger.info(
        "Valued %d of %d owned apps in %s (%d missed)", counted, len(appids), region, missed
    )
    return ValuationResult(
        value=total_value(quotes),
        currency_code=currency_code,
        currency=currency_symbol(currency_code),
        region=region,
        counted=counted,
        missed=missed,
        owned=len(appids),
    )
