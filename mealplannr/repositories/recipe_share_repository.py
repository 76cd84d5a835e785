from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Optional
from mealplannr.models.recipe import RecipeShare, Visibility
from mealplannr.repositories.repository import BaseRepository


class RecipeShareRepository(BaseRepository[RecipeShare]):
    """Repository for recipe sharing settings (at most one row per recipe)."""

    def __init__(self, db: Session):
        super().__init__(RecipeShare, db)

    def get_by_recipe(self, recipe_id: int) -> Optional[RecipeShare]:
        stmt = select(RecipeShare).where(RecipeShare.recipe_id == recipe_id)
        return self.db.execute(stmt).scalars().first()

    def upsert(
        self,
        recipe_id: int,
        visibility: Visibility,
        household_id: Optional[int] = None,
        network_id: Optional[int] = None
    ) -> RecipeShare:
        """Insert or replace the sharing settings of a recipe."""
        share = self.get_by_recipe(recipe_id)
        if share is None:
            share = RecipeShare(recipe_id=recipe_id)
            self.db.add(share)

        share.visibility = visibility
        share.household_id = household_id
        share.network_id = network_id

        self.db.flush()
        return share
