"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import auth, steam

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(steam.router, prefix="/steam", tags=["steam"])
