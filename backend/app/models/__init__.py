"""SQLAlchemy models exposed for metadata creation and imports."""
from .pending_recipe import ModerationStatus, PendingRecipe
from .recipe import Category, Favorite, Recipe
from .setting import Setting
from .user import User

__all__ = ["User", "Recipe", "Category", "Favorite", "PendingRecipe", "ModerationStatus", "Setting"]
