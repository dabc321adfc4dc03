"""Datetime parsing helpers for upstream payloads."""

from __future__ import annotations

import re
from datetime import datetime, timezone

_RELEASE_TOKEN_SPLIT_RE = re.compile(r"[\s,]+")
_YEAR_RE = re.compile(r"[0-9]{4}")


def parse_release_year(value: str | None) -> int | None:
    """Return the year from free-text release dates like "21 Aug, 2012".

    Only the last whitespace/comma-delimited token is considered, and only an
    exact four-digit token is accepted ("Coming soon", "Q3 2025," -> None).
    """
    if not value:
        return None
    token = _RELEASE_TOKEN_SPLIT_RE.split(str(value))[-1]
    if not _YEAR_RE.fullmatch(token):
        return None
    return int(token)


def epoch_to_datetime(value: int | float | None) -> datetime | None:
    """Convert a unix timestamp to an aware UTC datetime (0/None -> None)."""
    if not value:
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
