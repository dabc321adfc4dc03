from __future__ import annotations

import pytest

from steamscout.ingestion.payloads import AppDetailsPayload
from steamscout.models.catalog import EMPTY_METADATA
from steamscout.services.enrichment_service import enrich, metadata_from_details
from steamscout.tests.utils import DETAILS_PATH, app_details
from steamscout.utils.datetime import parse_release_year


@pytest.mark.asyncio
async def test_enrichment_is_total_when_one_lookup_fails(fake_steam, store_connector) -> None:
    appids = list(range(100, 110))
    for appid in appids:
        fake_steam.details[appid] = app_details(genres=["Action"], price=999, release="1 Jan, 2021")
    fake_steam.failing_appids.add(104)

    enriched = await enrich(appids, store_connector)

    assert list(enriched) == appids
    assert enriched[104] == EMPTY_METADATA
    assert enriched[104].is_empty
    assert all(enriched[appid].genres == ("Action",) for appid in appids if appid != 104)
    assert enriched[100].released_year == 2021


@pytest.mark.asyncio
async def test_unsuccessful_entries_map_to_empty_metadata(fake_steam, store_connector) -> None:
    fake_steam.details[1] = app_details(genres=["RPG"])

    enriched = await enrich([1, 2], store_connector, region="DE")

    assert enriched[1].genres == ("RPG",)
    assert enriched[2] is EMPTY_METADATA
    assert {request.url.params["cc"] for request in fake_steam.calls} == {"DE"}


@pytest.mark.asyncio
async def test_duplicate_ids_are_fetched_once(fake_steam, store_connector) -> None:
    enriched = await enrich([5, 5, 6, 5], store_connector)

    assert list(enriched) == [5, 6]
    assert fake_steam.count(DETAILS_PATH) == 2


@pytest.mark.asyncio
async def test_empty_request_makes_no_calls(fake_steam, store_connector) -> None:
    assert await enrich([], store_connector) == {}
    assert fake_steam.calls == []


def test_metadata_cleans_descriptions_and_clamps_discount() -> None:
    details = AppDetailsPayload.model_validate(
        {
            "success": True,
            "data": {
                "genres": [{"description": " Action "}, {"description": "Action"}, {"description": ""}],
                "categories": [{"description": "Single-player"}, {"description": None}],
                "price_overview": {"currency": "EUR", "final": 1499, "discount_percent": 140},
                "release_date": {"coming_soon": False, "date": None},
            },
        }
    )

    metadata = metadata_from_details(details)

    assert metadata.genres == ("Action",)
    assert metadata.categories == ("Single-player",)
    assert metadata.price_cents == 1499
    assert metadata.discount_pct == 100
    assert metadata.released_year is None


def test_unsuccessful_details_are_empty() -> None:
    assert metadata_from_details(AppDetailsPayload.model_validate({"success": False})) is EMPTY_METADATA


@pytest.mark.parametrize(
    "text,expected",
    [
        ("21 Aug, 2012", 2012),
        ("Aug 21, 2012", 2012),
        ("2019", 2019),
        ("Q3 2025", 2025),
        ("Coming soon", None),
        ("To be announced", None),
        ("12 Mar, 20233", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_release_year(text, expected) -> None:
    assert parse_release_year(text) == expected
