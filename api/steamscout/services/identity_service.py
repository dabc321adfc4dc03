"""Identity parsing and resolution for profile URLs, vanity aliases, and ids."""

from __future__ import annotations

import re
from dataclasses import dataclass

from steamscout.core.errors import IdentityNotFoundError, ValidationError
from steamscout.ingestion.steam_web import SteamWebConnector

STEAM_ID_RE = re.compile(r"[0-9]{17}")
_PROFILES_PATH_RE = re.compile(r"/profiles/([0-9]{17})")
_VANITY_PATH_RE = re.compile(r"/id/([^/?#\s]+)")
REGION_RE = re.compile(r"[A-Za-z]{2}")


@dataclass(frozen=True, slots=True)
class IdentityInput:
    """Parsed raw input: either a ready id or an alias that needs a lookup."""
    steam_id: str | None = None
    vanity: str | None = None


def validate_steam_id(value: str | None) -> str:
    """Return the id when it is exactly 17 digits, else raise ``ValidationError``."""
    candidate = (value or "").strip()
    if not STEAM_ID_RE.fullmatch(candidate):
        raise ValidationError("Invalid steamId (expected 17-digit SteamID64)", kind="invalid_steam_id")
    return candidate


def normalize_region(value: str | None) -> str:
    """Upper-case a two-letter region code, raising on anything else."""
    candidate = (value or "").strip()
    if not REGION_RE.fullmatch(candidate):
        raise ValidationError("Invalid region (expected two-letter country code)", kind="invalid_region")
    return candidate.upper()


def parse_identity(raw: str | None) -> IdentityInput:
    """Classify a profile URL, vanity URL, bare id, or bare alias."""
    text = (raw or "").strip()
    if not text:
        raise ValidationError("Identity input is empty", kind="invalid_identity")
    profile_match = _PROFILES_PATH_RE.search(text)
    if profile_match:
        return IdentityInput(steam_id=profile_match.group(1))
    vanity_match = _VANITY_PATH_RE.search(text)
    if vanity_match:
        return IdentityInput(vanity=vanity_match.group(1))
    if STEAM_ID_RE.fullmatch(text):
        return IdentityInput(steam_id=text)
    return IdentityInput(vanity=text)


async def resolve_identity(raw: str | None, connector: SteamWebConnector) -> str:
    """Return the canonical 17-digit id for any supported input form."""
    parsed = parse_identity(raw)
    if parsed.steam_id:
        return parsed.steam_id
    resolved = await connector.resolve_vanity(parsed.vanity or "")
    if not resolved or not STEAM_ID_RE.fullmatch(resolved):
        raise IdentityNotFoundError("Could not resolve vanity URL")
    return resolved
