"""API router aggregator."""
from fastapi import APIRouter

from app.api.routes import admin, ai, auth, favorites, moderation, recipes

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(recipes.router)
api_router.include_router(favorites.router)
api_router.include_router(moderation.router)
api_router.include_router(admin.router)
api_router.include_router(ai.router)

__all__ = ["api_router"]
