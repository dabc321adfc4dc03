"""Service-layer helpers for API operations."""

from . import (
    catalog_service,
    enrichment_service,
    fetch_pool,
    identity_service,
    profile_service,
    ranking,
    recommendation_service,
    storefront_meta_service,
    taste_profile_service,
    valuation_service,
)

__all__ = [
    "catalog_service",
    "enrichment_service",
    "fetch_pool",
    "identity_service",
    "profile_service",
    "ranking",
    "recommendation_service",
    "storefront_meta_service",
    "taste_profile_service",
    "valuation_service",
]
