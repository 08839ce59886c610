"""Database models for published recipes, categories and favorites."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models._time import utcnow

DEFAULT_CATEGORY = "Other"


class Recipe(Base):
    """Published recipe visible to everyone."""

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    ingredients: Mapped[str] = mapped_column(Text, default="", nullable=False)  # one per line
    instructions: Mapped[str] = mapped_column(Text, default="", nullable=False)  # one step per line
    image_url: Mapped[str | None] = mapped_column(String(2048), default=None)
    category: Mapped[str] = mapped_column(String(128), default=DEFAULT_CATEGORY, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

    favorites: Mapped[list["Favorite"]] = relationship(
        "Favorite", back_populates="recipe", cascade="all, delete-orphan", passive_deletes=True
    )


class Category(Base):
    """Named category offered by the recipe form; recipes store the name as text."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)


class Favorite(Base):
    """Marks a recipe as a favorite of a user."""

    __tablename__ = "favorites"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    recipe_id: Mapped[int] = mapped_column(ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="favorites")
    recipe: Mapped[Recipe] = relationship("Recipe", back_populates="favorites")

    __table_args__ = (
        UniqueConstraint("user_id", "recipe_id", name="uq_favorite_user_recipe"),
    )
