from sqlalchemy import String, Boolean
from sqlalchemy.orm import relationship, Mapped, mapped_column
from typing import Optional, List, TYPE_CHECKING
from mealplannr.models.base import BaseModel
if TYPE_CHECKING:
    from mealplannr.models.household import HouseholdMember
    from mealplannr.models.recipe import Recipe


class User(BaseModel):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    display_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default=None)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # Site administrator: bypasses household role restrictions
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relationships
    memberships: Mapped[List["HouseholdMember"]] = relationship(
        "HouseholdMember",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin"
    )
    recipes: Mapped[List["Recipe"]] = relationship(
        "Recipe",
        back_populates="author",
        foreign_keys="[Recipe.author_id]",
        lazy="select"
    )

    @property
    def name(self) -> str:
        """Name shown to other users"""
        return self.display_name or self.username
