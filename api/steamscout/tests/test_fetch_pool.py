from __future__ import annotations

import asyncio
from collections import Counter

import pytest

from steamscout.core.errors import UpstreamError
from steamscout.services import fetch_pool
from steamscout.services.fetch_pool import BoundedFetchPool


@pytest.mark.asyncio
async def test_outcomes_follow_input_order_not_completion_order() -> None:
    pool = BoundedFetchPool(3, name="test")
    items = list(range(10))
    completed: list[int] = []

    async def fetch(item: int) -> int:
        # Later items finish first.
        await asyncio.sleep(0.001 * (10 - item))
        completed.append(item)
        return item * 2

    outcomes = await pool.run(items, fetch)

    assert len(outcomes) == 10
    assert [outcome.index for outcome in outcomes] == items
    assert [outcome.value for outcome in outcomes] == [item * 2 for item in items]
    assert all(outcome.ok for outcome in outcomes)
    assert completed != items


@pytest.mark.asyncio
async def test_in_flight_work_never_exceeds_concurrency() -> None:
    pool = BoundedFetchPool(3)
    in_flight = 0
    peak = 0

    async def fetch(item: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.002)
        in_flight -= 1
        return item

    await pool.run(list(range(25)), fetch)

    assert peak == 3


@pytest.mark.asyncio
async def test_each_item_is_processed_exactly_once() -> None:
    seen: Counter[int] = Counter()

    async def fetch(item: int) -> None:
        seen[item] += 1
        await asyncio.sleep(0)

    await BoundedFetchPool(4).run(list(range(50)), fetch)

    assert set(seen) == set(range(50))
    assert set(seen.values()) == {1}


@pytest.mark.asyncio
async def test_failures_become_misses_without_aborting_the_batch() -> None:
    async def fetch(item: int) -> int:
        if item == 2:
            raise RuntimeError("upstream exploded")
        return item

    outcomes = await BoundedFetchPool(2).run([0, 1, 2, 3, 4], fetch)

    assert [outcome.ok for outcome in outcomes] == [True, True, False, True, True]
    assert outcomes[2].missed
    assert outcomes[2].value is None
    assert isinstance(outcomes[2].error, RuntimeError)


@pytest.mark.asyncio
async def test_empty_input_spawns_no_work() -> None:
    called = False

    async def fetch(item: int) -> int:
        nonlocal called
        called = True
        return item

    assert await BoundedFetchPool(3).run([], fetch) == []
    assert called is False


@pytest.mark.asyncio
async def test_timeout_raises_but_lets_the_batch_finish() -> None:
    finished: list[int] = []

    async def fetch(item: int) -> int:
        await asyncio.sleep(0.05)
        finished.append(item)
        return item

    with pytest.raises(UpstreamError) as excinfo:
        await BoundedFetchPool(2, name="slow").run([1, 2], fetch, timeout=0.005)

    assert excinfo.value.kind == "fetch_timeout"
    assert len(fetch_pool._abandoned_batches) == 1
    await asyncio.sleep(0.1)
    assert sorted(finished) == [1, 2]
    assert not fetch_pool._abandoned_batches


def test_pool_rejects_non_positive_concurrency() -> None:
    with pytest.raises(ValueError):
        BoundedFetchPool(0)
