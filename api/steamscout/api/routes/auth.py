from fastapi import APIRouter, Depends

from steamscout.api.deps import get_steam_web_connector
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.schema.steam import IdentityResolveRead, IdentityResolveRequest
from steamscout.services.identity_service import resolve_identity

router = APIRouter()


@router.post("/steam/resolve", response_model=IdentityResolveRead)
async def resolve_steam_identity(
    payload: IdentityResolveRequest,
    web: SteamWebConnector = Depends(get_steam_web_connector),
) -> IdentityResolveRead:
    """Turn a profile URL, vanity alias, or bare id into a 64-bit id."""
    steam_id = await resolve_identity(payload.input, web)
    return IdentityResolveRead(steam_id=steam_id)
