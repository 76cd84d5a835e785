from sqlalchemy import String, Integer, Text, ForeignKey, Numeric, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
import enum
from mealplannr.models.base import Base, BaseModel, utc_now
if TYPE_CHECKING:
    from mealplannr.models.user import User


class RecipeStatus(str, enum.Enum):
    """Publication status of a recipe"""

    PUBLISH = "publish"
    DRAFT = "draft"


class Visibility(str, enum.Enum):
    """Who besides the author may see a recipe"""

    PRIVATE = "private"
    HOUSEHOLD = "household"
    NETWORK = "network"
    PUBLIC = "public"


class Recipe(BaseModel):
    """
    Recipe content item.
    Access is governed by its RecipeShare row; without one only the author sees it.
    """

    __tablename__ = "recipes"

    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    status: Mapped[RecipeStatus] = mapped_column(
        SQLEnum(RecipeStatus), default=RecipeStatus.PUBLISH, nullable=False, index=True
    )

    author_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    author: Mapped["User"] = relationship(
        "User",
        back_populates="recipes",
        foreign_keys=[author_id],
        lazy="selectin",
    )

    share: Mapped[Optional["RecipeShare"]] = relationship(
        "RecipeShare",
        back_populates="recipe",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )

    macros: Mapped[Optional["RecipeMacros"]] = relationship(
        "RecipeMacros",
        back_populates="recipe",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )

    ingredients: Mapped[List["RecipeIngredient"]] = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.sort_order",
        lazy="select",
    )

    @property
    def visibility(self) -> Visibility:
        """Effective visibility; recipes without sharing settings are private"""
        return self.share.visibility if self.share else Visibility.PRIVATE


class RecipeShare(Base):
    """
    Sharing settings for a recipe (one row per recipe).
    household_id is set only for household visibility, network_id only for network visibility.
    """

    __tablename__ = "recipe_shares"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    visibility: Mapped[Visibility] = mapped_column(
        SQLEnum(Visibility), default=Visibility.PRIVATE, nullable=False
    )
    household_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("households.id", ondelete="SET NULL"), nullable=True, index=True
    )
    network_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("networks.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="share")


class RecipeMacros(Base):
    """Macro-nutrient values for a recipe, upserted by the editor."""

    __tablename__ = "recipe_macros"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    protein: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2), nullable=True, default=0)
    carbs: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2), nullable=True, default=0)
    fat: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2), nullable=True, default=0)
    calories: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2), nullable=True, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=True
    )

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="macros")


class RecipeIngredient(Base):
    """
    One line of a recipe's ingredient list.
    The whole list is replaced on every save; sort_order keeps the editor's order.
    """

    __tablename__ = "recipe_ingredients"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Quantity details, either or both of volume and weight
    quantity_volume: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2), nullable=True, default=None)
    unit_volume: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default=None)
    quantity_weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2), nullable=True, default=None)
    unit_weight: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default=None)

    # Optional notes (e.g., "chopped", "diced")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")
