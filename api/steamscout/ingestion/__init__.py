"""Connectors for the upstream Steam services."""

from __future__ import annotations

from steamscout.ingestion.base import BaseConnector
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.ingestion.storefront import StorefrontConnector

__all__ = ["BaseConnector", "SteamWebConnector", "StorefrontConnector"]
