"""Metrics tracking and structured logging for upstream fetches."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, DefaultDict, TypeVar

from steamscout.utils.redaction import redact_secrets

logger = logging.getLogger("steamscout.ingestion")

T = TypeVar("T")


@dataclass
class OperationMetrics:
    """Aggregated counters for a source operation."""
    started: int = 0
    succeeded: int = 0
    failed: int = 0
    last_latency_ms: float | None = None
    last_error: str | None = None


class FetchMonitor:
    """Track upstream fetch outcomes per source and operation.

    The monitor only observes: it never blocks, skips or retries a call.
    """

    def __init__(self) -> None:
        self._metrics: DefaultDict[str, DefaultDict[str, OperationMetrics]] = defaultdict(
            lambda: defaultdict(OperationMetrics)
        )
        self._lock = asyncio.Lock()

    async def track(
        self,
        source: str,
        operation: str,
        func: Callable[[], Awaitable[T]],
        *,
        context: dict[str, Any] | None = None,
    ) -> T:
        """Execute an upstream call while recording latency and outcome.

        Implementation notes:
        - Failures are logged as structured events and re-raised unchanged.
        - Successes clear the operation's last error.
        """
        context = context or {}
        async with self._lock:
            self._metrics[source][operation].started += 1

        start = time.monotonic()
        try:
            result = await func()
        except Exception as exc:  # noqa: BLE001
            latency_ms = (time.monotonic() - start) * 1000
            error = redact_secrets(str(exc))
            async with self._lock:
                metrics = self._metrics[source][operation]
                metrics.failed += 1
                metrics.last_latency_ms = latency_ms
                metrics.last_error = error
            payload = {
                "event": "fetch_failure",
                "source": source,
                "operation": operation,
                "error": error,
                "latency_ms": round(latency_ms, 2),
                "context": context,
            }
            logger.warning(json.dumps(payload))
            raise

        latency_ms = (time.monotonic() - start) * 1000
        async with self._lock:
            metrics = self._metrics[source][operation]
            metrics.succeeded += 1
            metrics.last_latency_ms = latency_ms
            metrics.last_error = None
        payload = {
            "event": "fetch_success",
            "source": source,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "context": context,
        }
        logger.debug(json.dumps(payload))
        return result

    async def snapshot(self) -> dict[str, Any]:
        """Return a snapshot of all tracked source metrics."""
        async with self._lock:
            return {
                source: {
                    "operations": {
                        name: {
                            "started": metrics.started,
                            "succeeded": metrics.succeeded,
                            "failed": metrics.failed,
                            "last_latency_ms": metrics.last_latency_ms,
                            "last_error": metrics.last_error,
                        }
                        for name, metrics in operations.items()
                    },
                }
                for source, operations in self._metrics.items()
            }

    async def reset(self) -> None:
        async with self._lock:
            self._metrics.clear()


fetch_monitor = FetchMonitor()
