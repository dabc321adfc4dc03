from __future__ import annotations

from datetime import datetime, timezone

import pytest

from steamscout.core.errors import ValidationError
from steamscout.models.catalog import CandidateItem, TasteProfile
from steamscout.models.library import LibraryEntry, LibrarySnapshot, ProfileSnapshot
from steamscout.services import recommendation_service
from steamscout.services.recommendation_service import (
    STRATEGY_FALLBACK,
    STRATEGY_SCORED,
    build_recommendations,
    recommend,
)
from steamscout.tests.utils import DETAILS_PATH, STEAM_ID, app_details, featured_item, owned_game

REFERENCE_YEAR = 2025


def _snapshot(*entries: LibraryEntry) -> ProfileSnapshot:
    games = list(entries)
    return ProfileSnapshot(
        steam_id=STEAM_ID,
        profile=None,
        is_private=False,
        library=LibrarySnapshot(
            total_games=len(games),
            total_minutes=sum(entry.minutes for entry in games),
            never_played=0,
            all_games=games,
            top_games=games,
            owned_ids=frozenset(entry.appid for entry in games),
        ),
        fetched_at=datetime.now(timezone.utc),
    )


def _entry(appid: int, minutes: int) -> LibraryEntry:
    return LibraryEntry(appid=appid, name=f"Owned {appid}", header_image=f"h{appid}", minutes=minutes)


def _candidate(appid: int, discount: int = 0, price: int | None = 1999) -> CandidateItem:
    return CandidateItem(
        appid=appid, name=f"Game {appid}", header_image=f"h{appid}", discount_pct=discount, price_cents=price
    )


@pytest.mark.asyncio
async def test_owned_items_never_appear_in_recommendations(fake_steam, store_connector) -> None:
    snapshot = _snapshot(_entry(10, 3000))
    fake_steam.details[10] = app_details(genres=["RPG"], release="1 Jan, 2024")
    fake_steam.details[20] = app_details(genres=["RPG"], release="1 Jan, 2024")
    fake_steam.details[30] = app_details(genres=["Puzzle"], release="1 Jan, 2024")

    result = await recommend(
        snapshot,
        [_candidate(10), _candidate(20), _candidate(30)],
        store_connector,
        reference_year=REFERENCE_YEAR,
    )

    assert result.strategy == STRATEGY_SCORED
    assert result.fallback_reason is None
    assert [item.appid for item in result.items] == [20, 30]
    assert result.taste.favorite_genres == ("RPG",)


@pytest.mark.asyncio
async def test_unavailable_enrichment_uses_the_discount_fallback(fake_steam, store_connector) -> None:
    fake_steam.failing_appids.update({1, 2, 3})

    result = await recommend(
        _snapshot(),
        [_candidate(1, discount=10), _candidate(2, discount=60), _candidate(3, discount=0, price=None)],
        store_connector,
        reference_year=REFERENCE_YEAR,
    )

    assert result.strategy == STRATEGY_FALLBACK
    assert result.fallback_reason == "enrichment_unavailable"
    assert [item.appid for item in result.items] == [2, 1, 3]
    scores = [item.score for item in result.items]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_no_unowned_candidates_returns_empty_fallback(fake_steam, store_connector) -> None:
    result = await recommend(_snapshot(_entry(1, 10)), [_candidate(1)], store_connector)

    assert result.strategy == STRATEGY_FALLBACK
    assert result.fallback_reason == "no_candidates"
    assert result.items == []
    assert fake_steam.calls == []


@pytest.mark.asyncio
async def test_no_survivors_falls_back(fake_steam, store_connector) -> None:
    fake_steam.details[1] = app_details(categories=["Demo"])
    fake_steam.details[2] = app_details(categories=["Application"])

    result = await recommend(
        _snapshot(), [_candidate(1), _candidate(2, discount=5)], store_connector, reference_year=REFERENCE_YEAR
    )

    assert result.fallback_reason == "no_survivors"
    assert [item.appid for item in result.items] == [2, 1]


@pytest.mark.asyncio
async def test_scoring_failure_falls_back(fake_steam, store_connector, monkeypatch) -> None:
    fake_steam.details[1] = app_details(genres=["Action"])

    def _explode(*args, **kwargs):
        raise ZeroDivisionError("bad weights")

    monkeypatch.setattr(recommendation_service, "score_candidates", _explode)

    result = await recommend(_snapshot(), [_candidate(1)], store_connector)

    assert result.strategy == STRATEGY_FALLBACK
    assert result.fallback_reason == "scoring_failed"
    assert [item.appid for item in result.items] == [1]


@pytest.mark.asyncio
async def test_explicit_taste_skips_library_enrichment(fake_steam, store_connector) -> None:
    snapshot = _snapshot(_entry(10, 5000), _entry(11, 4000))
    fake_steam.details[20] = app_details(genres=["Strategy"], release="1 Jan, 2025")
    fake_steam.details[30] = app_details(genres=["Action"], release="1 Jan, 2025")
    taste = TasteProfile(favorite_genres=("Strategy",))

    result = await recommend(
        snapshot, [_candidate(30), _candidate(20)], store_connector, taste=taste, reference_year=REFERENCE_YEAR
    )

    requested = sorted(int(request.url.params["appids"]) for request in fake_steam.calls)
    assert requested == [20, 30]
    assert result.taste == taste
    assert [item.appid for item in result.items] == [20, 30]


@pytest.mark.asyncio
async def test_inferred_taste_enriches_top_owned_games(fake_steam, store_connector, monkeypatch) -> None:
    monkeypatch.setattr(recommendation_service.settings, "taste_library_limit", 1)
    snapshot = _snapshot(_entry(10, 50), _entry(11, 9000))
    fake_steam.details[11] = app_details(genres=["Racing"])
    fake_steam.details[20] = app_details(genres=["Racing"])

    result = await recommend(snapshot, [_candidate(20)], store_connector, reference_year=REFERENCE_YEAR)

    requested = [int(request.url.params["appids"]) for request in fake_steam.calls]
    assert sorted(requested) == [11, 20]
    assert result.taste.favorite_genres == ("Racing",)


@pytest.mark.asyncio
async def test_build_recommendations_runs_the_whole_pipeline(fake_steam, web_connector, store_connector) -> None:
    fake_steam.owned = [owned_game(10, "Owned RPG", 6000)]
    fake_steam.featured = {
        "top_sellers": {"items": [featured_item(10, "Owned RPG"), featured_item(20, "New RPG")]},
        "specials": {"items": [featured_item(30, "Cheap Puzzle", discount=80)]},
    }
    fake_steam.details[10] = app_details(genres=["RPG"], release="1 Jan, 2020")
    fake_steam.details[20] = app_details(genres=["RPG"], release="1 Jan, 2024")
    fake_steam.details[30] = app_details(genres=["Puzzle"], discount=80, release="1 Jan, 2023")

    snapshot, result = await build_recommendations(
        STEAM_ID, "us", web_connector, store_connector, limit=5
    )

    assert snapshot.library.owns(10)
    assert result.strategy == STRATEGY_SCORED
    assert 10 not in [item.appid for item in result.items]
    assert {item.appid for item in result.items} == {20, 30}
    assert fake_steam.count(DETAILS_PATH) == 3


@pytest.mark.asyncio
async def test_build_recommendations_validates_before_fetching(fake_steam, web_connector, store_connector) -> None:
    with pytest.raises(ValidationError):
        await build_recommendations("not-an-id", "US", web_connector, store_connector)
    with pytest.raises(ValidationError):
        await build_recommendations(STEAM_ID, "U5", web_connector, store_connector)

    assert fake_steam.calls == []
