"""Route modules for the Rezept API."""
from . import admin, ai, auth, favorites, moderation, recipes

__all__ = ["admin", "ai", "auth", "favorites", "moderation", "recipes"]
