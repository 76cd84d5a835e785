from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Any, Dict, Optional
from mealplannr.models.recipe import RecipeMacros
from mealplannr.repositories.repository import BaseRepository

MACRO_FIELDS = ("protein", "carbs", "fat", "calories")


class MacrosRepository(BaseRepository[RecipeMacros]):
    """Repository for recipe macro values (one row per recipe)."""

    def __init__(self, db: Session):
        super().__init__(RecipeMacros, db)

    def get_by_recipe(self, recipe_id: int) -> Optional[RecipeMacros]:
        stmt = select(RecipeMacros).where(RecipeMacros.recipe_id == recipe_id)
        return self.db.execute(stmt).scalars().first()

    def upsert(self, recipe_id: int, values: Dict[str, Any]) -> RecipeMacros:
        """Insert or update the macros of a recipe; keys outside the macro fields are ignored."""
        macros = self.get_by_recipe(recipe_id)
        if macros is None:
            macros = RecipeMacros(recipe_id=recipe_id)
            self.db.add(macros)

        for field in MACRO_FIELDS:
            if field in values:
                setattr(macros, field, values[field])

        self.db.flush()
        return macros
