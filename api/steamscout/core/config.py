"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]
DEFAULT_GEO_COUNTRY_HEADERS = ["x-vercel-ip-country", "x-forwarded-country", "cf-ipcountry"]


def _split_list(value: str | list[str] | None) -> list[str] | None:
    """Parse JSON, CSV, or list inputs into a cleaned list (None when empty)."""
    if isinstance(value, list):
        cleaned = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return cleaned or None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            cleaned = [str(item).strip() for item in parsed if str(item).strip()]
            return cleaned or None
        items = [item.strip() for item in stripped.split(",") if item.strip()]
        return items or None
    return None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Steamscout API"
    environment: str = "development"
    api_prefix: str = "/api"

    steam_api_key: Optional[str] = None
    steam_web_api_base: str = "https://api.steampowered.com"
    steam_store_base: str = "https://store.steampowered.com"
    steam_asset_base: str = "https://shared.fastly.steamstatic.com/store_item_assets/steam/apps"
    steam_logo_base: str = "https://media.steampowered.com/steamcommunity/public/images/apps"

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())
    geo_country_headers: list[str] | str = Field(default_factory=lambda: DEFAULT_GEO_COUNTRY_HEADERS.copy())
    default_region: str = "US"

    http_timeout_seconds: float = 15.0
    profile_concurrency: int = 3
    valuation_concurrency: int = 8
    enrichment_concurrency: int = 6
    catalog_max_candidates: int = 400
    recommendation_limit: int = 60
    recommendation_max_limit: int = 200
    taste_library_limit: int = 200
    enrich_max_ids: int = 1000

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize CORS origins from JSON, CSV, or list inputs."""
        return _split_list(value) or DEFAULT_CORS_ORIGINS.copy()

    @field_validator("geo_country_headers", mode="before")
    @classmethod
    def _split_geo_country_headers(cls, value: str | list[str] | None) -> list[str]:
        """Normalize geolocation header names; lookups are case-insensitive."""
        headers = _split_list(value) or DEFAULT_GEO_COUNTRY_HEADERS.copy()
        return [header.lower() for header in headers]

    @field_validator("default_region")
    @classmethod
    def _validate_default_region(cls, value: str) -> str:
        cleaned = value.strip().upper()
        if len(cleaned) != 2 or not cleaned.isalpha():
            raise ValueError("DEFAULT_REGION must be a two-letter country code")
        return cleaned

    @field_validator(
        "profile_concurrency",
        "valuation_concurrency",
        "enrichment_concurrency",
        "catalog_max_candidates",
        "recommendation_limit",
        "recommendation_max_limit",
        "enrich_max_ids",
    )
    @classmethod
    def _require_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid re-parsing environment variables."""
    return Settings()


settings = get_settings()
