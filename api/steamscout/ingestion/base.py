"""Base connector primitives for upstream Steam services."""

from __future__ import annotations

from typing import Any

import httpx

from steamscout.ingestion.http import fetch_json
from steamscout.ingestion.observability import FetchMonitor, fetch_monitor


class BaseConnector:
    """Shared plumbing for connectors bound to one request-scoped HTTP client."""
    source_name: str

    def __init__(self, client: httpx.AsyncClient, *, monitor: FetchMonitor | None = None) -> None:
        self.client = client
        self.monitor = monitor or fetch_monitor

    async def _get_json(
        self,
        operation: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> Any:
        """GET a JSON document, recording the call on the fetch monitor."""

        async def _call() -> Any:
            return await fetch_json(self.client, url, params=params, headers=headers)

        return await self.monitor.track(self.source_name, operation, _call, context=context)
