from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response

from steamscout.api.deps import get_steam_web_connector, get_storefront_connector
from steamscout.core.config import settings
from steamscout.core.errors import ValidationError
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.ingestion.storefront import StorefrontConnector
from steamscout.models.catalog import TasteProfile
from steamscout.schema.steam import (
    CandidateRead,
    CatalogRead,
    EnrichedRead,
    EnrichRead,
    EnrichRequest,
    MetaRead,
    ProfileRead,
    RecommendationItem,
    RecommendationRead,
    RecommendationRequest,
    TasteRead,
    ValuationRead,
)
from steamscout.services import (
    catalog_service,
    enrichment_service,
    profile_service,
    storefront_meta_service,
    valuation_service,
)
from steamscout.services.identity_service import normalize_region
from steamscout.services.recommendation_service import build_recommendations
from steamscout.services.taste_profile_service import taste_from_preferences

router = APIRouter()

NO_STORE = "no-store"
VALUE_CACHE = "s-maxage=300, stale-while-revalidate=600"
ENRICH_CACHE = "public, max-age=300, stale-while-revalidate=600"
CATALOG_CACHE = "public, max-age=300"


def _resolve_limit(limit: int | None) -> int:
    if limit is None:
        return settings.recommendation_limit
    return min(limit, settings.recommendation_max_limit)


@router.get("/profile/{steam_id}", response_model=ProfileRead)
async def get_profile(
    steam_id: str,
    response: Response,
    web: SteamWebConnector = Depends(get_steam_web_connector),
) -> ProfileRead:
    snapshot = await profile_service.aggregate_profile(steam_id, web)
    response.headers["Cache-Control"] = NO_STORE
    return ProfileRead.model_validate(snapshot)


@router.get("/value/{steam_id}", response_model=ValuationRead)
async def get_value(
    steam_id: str,
    request: Request,
    response: Response,
    cc: str | None = Query(default=None),
    web: SteamWebConnector = Depends(get_steam_web_connector),
    store: StorefrontConnector = Depends(get_storefront_connector),
) -> ValuationRead:
    """Estimate the library's current store value in the caller's region."""
    region = valuation_service.resolve_region(cc, request.headers)
    result = await valuation_service.estimate_value(steam_id, region, web, store)
    response.headers["Cache-Control"] = VALUE_CACHE
    return ValuationRead(
        steam_id=steam_id.strip(),
        value=float(result.value),
        currency_code=result.currency_code,
        currency=result.currency,
        region=result.region,
        counted=result.counted,
        missed=result.missed,
        owned=result.owned,
    )


@router.get("/catalog", response_model=CatalogRead)
async def get_catalog(
    request: Request,
    response: Response,
    cc: str | None = Query(default=None),
    store: StorefrontConnector = Depends(get_storefront_connector),
) -> CatalogRead:
    region = valuation_service.resolve_region(cc, request.headers)
    candidates = await catalog_service.sample_catalog(region, store)
    response.headers["Cache-Control"] = CATALOG_CACHE
    return CatalogRead(region=region, items=[CandidateRead.model_validate(item) for item in candidates])


@router.post("/enrich", response_model=EnrichRead)
async def post_enrich(
    payload: EnrichRequest,
    response: Response,
    store: StorefrontConnector = Depends(get_storefront_connector),
) -> EnrichRead:
    region = normalize_region(payload.cc) if payload.cc else None
    appids = list(dict.fromkeys(payload.appids))
    if len(appids) > settings.enrich_max_ids:
        raise ValidationError(
            f"At most {settings.enrich_max_ids} app ids per request", kind="too_many_ids"
        )
    enriched = await enrichment_service.enrich(appids, store, region=region)
    response.headers["Cache-Control"] = ENRICH_CACHE
    return EnrichRead(
        items={str(appid): EnrichedRead.model_validate(metadata) for appid, metadata in enriched.items()}
    )


async def _recommend(
    steam_id: str,
    region: str,
    web: SteamWebConnector,
    store: StorefrontConnector,
    *,
    taste: TasteProfile | None,
    limit: int | None,
) -> RecommendationRead:
    snapshot, result = await build_recommendations(
        steam_id, region, web, store, taste=taste, limit=_resolve_limit(limit)
    )
    return RecommendationRead(
        steam_id=snapshot.steam_id,
        region=region,
        strategy=result.strategy,
        fallback_reason=result.fallback_reason,
        is_private=snapshot.is_private,
        taste=TasteRead.model_validate(result.taste),
        items=[RecommendationItem.from_scored(item) for item in result.items],
    )


@router.get("/recommendations/{steam_id}", response_model=RecommendationRead)
async def get_recommendations(
    steam_id: str,
    request: Request,
    response: Response,
    cc: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1),
    web: SteamWebConnector = Depends(get_steam_web_connector),
    store: StorefrontConnector = Depends(get_storefront_connector),
) -> RecommendationRead:
    """Rank promoted items for a user, inferring taste from their playtime."""
    region = valuation_service.resolve_region(cc, request.headers)
    response.headers["Cache-Control"] = NO_STORE
    return await _recommend(steam_id, region, web, store, taste=None, limit=limit)


@router.post("/recommendations", response_model=RecommendationRead)
async def post_recommendations(
    payload: RecommendationRequest,
    request: Request,
    response: Response,
    web: SteamWebConnector = Depends(get_steam_web_connector),
    store: StorefrontConnector = Depends(get_storefront_connector),
) -> RecommendationRead:
    """Rank promoted items against explicit favorites, inferring when none are given."""
    region = valuation_service.resolve_region(payload.cc, request.headers)
    taste = taste_from_preferences(payload.favorite_genres, payload.favorite_categories)
    response.headers["Cache-Control"] = NO_STORE
    return await _recommend(payload.steam_id, region, web, store, taste=taste, limit=payload.limit)


@router.get("/meta", response_model=MetaRead)
async def get_meta(
    request: Request,
    response: Response,
    cc: str | None = Query(default=None),
    store: StorefrontConnector = Depends(get_storefront_connector),
) -> MetaRead:
    """Count of discounted items and the countdown to the next sale boundary."""
    region = valuation_service.resolve_region(cc, request.headers)
    meta = await storefront_meta_service.storefront_meta(region, store)
    response.headers["Cache-Control"] = NO_STORE
    return MetaRead.from_meta(meta)
