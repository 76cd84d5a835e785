from sqlalchemy.orm import Session
from sqlalchemy import delete
from typing import Any, Dict, List
from mealplannr.models.recipe import RecipeIngredient
from mealplannr.repositories.repository import BaseRepository


class IngredientRepository(BaseRepository[RecipeIngredient]):
    """Repository for recipe ingredient lines."""

    def __init__(self, db: Session):
        super().__init__(RecipeIngredient, db)

    def get_by_recipe(self, recipe_id: int) -> List[RecipeIngredient]:
        """Get the ingredient lines of a recipe in list order."""
        return (
            self.db.query(RecipeIngredient)
            .filter(RecipeIngredient.recipe_id == recipe_id)
            .order_by(RecipeIngredient.sort_order, RecipeIngredient.id)
            .all()
        )

    def delete_by_recipe(self, recipe_id: int) -> int:
        """Delete every ingredient line of a recipe. Flushes only."""
        result = self.db.execute(
            delete(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id)
        )
        self.db.flush()
        return result.rowcount

    def replace_for_recipe(self, recipe_id: int, lines: List[Dict[str, Any]]) -> List[RecipeIngredient]:
        """
        Replace the ingredient list of a recipe.

        Existing lines are deleted and the new ones inserted with sort_order
        set to their list position. Flushes only; run it inside a unit of work.
        """
        self.delete_by_recipe(recipe_id)

        rows = [
            RecipeIngredient(recipe_id=recipe_id, sort_order=position, **line)
            for position, line in enumerate(lines)
        ]
        self.db.add_all(rows)
        self.db.flush()
        return rows
