from __future__ import annotations

from typing import Any

import httpx

from steamscout.core.errors import UpstreamError


def _describe(url: str | httpx.URL) -> str:
    """Return the URL without its query string so keys never reach messages."""
    return str(httpx.URL(str(url)).copy_with(query=None))


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """Issue one GET and decode its JSON body.

    Transport failures, non-2xx statuses and undecodable bodies are all
    converted to ``UpstreamError``. No retries are attempted.
    """
    try:
        response = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as exc:
        raise UpstreamError(f"Timed out calling {_describe(url)}", kind="upstream_timeout") from exc
    except httpx.HTTPError as exc:
        raise UpstreamError(f"Request to {_describe(url)} failed: {type(exc).__name__}") from exc
    if response.status_code >= 400:
        raise UpstreamError(
            f"{_describe(url)} returned status {response.status_code}",
            kind="upstream_status",
            upstream_status=response.status_code,
        )
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"{_describe(url)} returned malformed JSON", kind="upstream_payload") from exc
