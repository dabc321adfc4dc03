"""Bounded-concurrency fan-out for independent upstream fetches.

Invariants:
- At most ``concurrency`` items are in flight for a batch.
- Each item is claimed by exactly one worker (``Queue.get_nowait`` never awaits).
- Outcomes are aligned to the input order; a failing item becomes a miss.
- Abandoning a batch on timeout never cancels fetches that already started.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

from steamscout.core.errors import UpstreamError

logger = logging.getLogger("steamscout.services.fetch_pool")

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")

# Batches whose caller stopped waiting; held until they finish on their own.
_abandoned_batches: set[asyncio.Task] = set()


@dataclass(slots=True)
class FetchOutcome(Generic[ResultT]):
    """Result slot for one input item: either a value or the captured error."""
    index: int
    value: ResultT | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def missed(self) -> bool:
        return self.error is not None


class BoundedFetchPool:
    """Run one operation per item with a fixed number of workers."""

    def __init__(self, concurrency: int, *, name: str = "fetch") -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self.name = name

    async def run(
        self,
        items: Sequence[ItemT],
        operation: Callable[[ItemT], Awaitable[ResultT]],
        *,
        timeout: float | None = None,
    ) -> list[FetchOutcome[ResultT]]:
        """Execute ``operation`` over ``items`` and return index-aligned outcomes.

        ``timeout`` bounds how long the caller waits; on expiry an
        ``UpstreamError`` is raised while the batch keeps draining.
        """
        if not items:
            return []
        batch = asyncio.ensure_future(self._drain(list(items), operation))
        if timeout is None:
            return await batch
        try:
            return await asyncio.wait_for(asyncio.shield(batch), timeout)
        except asyncio.TimeoutError as exc:
            _abandoned_batches.add(batch)
            batch.add_done_callback(_abandoned_batches.discard)
            logger.warning("Stopped waiting on %s batch of %d items after %.2fs", self.name, len(items), timeout)
            raise UpstreamError(
                f"{self.name} batch did not finish within {timeout:.2f}s", kind="fetch_timeout"
            ) from exc

    async def _drain(
        self,
        items: list[ItemT],
        operation: Callable[[ItemT], Awaitable[ResultT]],
    ) -> list[FetchOutcome[ResultT]]:
        queue: asyncio.Queue[tuple[int, ItemT]] = asyncio.Queue()
        for index, item in enumerate(items):
            queue.put_nowait((index, item))
        outcomes: list[FetchOutcome[ResultT] | None] = [None] * len(items)

        async def worker() -> None:
            while True:
                try:
                    index, item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    value = await operation(item)
                except Exception as exc:  # noqa: BLE001
                    logger.debug("%s item %d missed: %s", self.name, index, type(exc).__name__)
                    outcomes[index] = FetchOutcome(index=index, error=exc)
                else:
                    outcomes[index] = FetchOutcome(index=index, value=value)

        workers = [worker() for _ in range(min(self.concurrency, len(items)))]
        await asyncio.gather(*workers)
        return [outcome for outcome in outcomes if outcome is not None]
