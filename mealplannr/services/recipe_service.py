import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from mealplannr.core.permissions import Action, policy
from mealplannr.database import unit_of_work
from mealplannr.models.recipe import Recipe, RecipeIngredient, RecipeMacros
from mealplannr.models.user import User
from mealplannr.repositories.ingredient_repository import IngredientRepository
from mealplannr.repositories.macros_repository import MacrosRepository, MACRO_FIELDS
from mealplannr.repositories.recipe_repository import RecipeRepository
from mealplannr.schemas.ingredient import IngredientLine
from mealplannr.schemas.recipe import RecipeCreate, MacrosValues
from mealplannr.services.recipe_access_service import RecipeAccessService
from mealplannr.core.exception import ResourceNotFoundException, AuthorizationException

logger = logging.getLogger(__name__)


class RecipeService:
    """Service layer for recipes, their ingredient lists and macros."""

    def __init__(self, db: Session):
        self.db = db
        self.recipe_repo = RecipeRepository(db)
        self.ingredient_repo = IngredientRepository(db)
        self.macros_repo = MacrosRepository(db)
        self.access = RecipeAccessService(db)

    def create_recipe(self, user: User, data: RecipeCreate) -> Recipe:
        """
        Create a recipe authored by the user.

        Raises:
            AuthorizationException: If the user may not write recipes
        """
        policy.require(user, Action.CREATE_RECIPE)

        recipe = Recipe(
            title=data.title,
            content=data.content,
            status=data.status,
            author_id=user.id
        )
        with unit_of_work(self.db, "create recipe"):
            self.recipe_repo.add(recipe)

        self.db.refresh(recipe)
        logger.info("Recipe %s created by user %s", recipe.id, user.id)
        return recipe

    def get_recipe(self, recipe_id: int, user: User) -> Recipe:
        """
        Get a recipe the user may read.

        Unreadable recipes are reported as not found.
        """
        recipe = self.recipe_repo.get(recipe_id)
        if not recipe or not self.access.can_access_recipe(recipe, user.id):
            raise ResourceNotFoundException("Recipe", recipe_id)
        return recipe

    def list_my_recipes(self, user: User, skip: int = 0, limit: int = 100) -> List[Recipe]:
        return self.recipe_repo.get_by_author(user.id, skip=skip, limit=limit)

    def delete_recipe(self, recipe_id: int, user: User) -> bool:
        recipe = self._get_editable(recipe_id, user, Action.DELETE_RECIPE)
        with unit_of_work(self.db, "delete recipe"):
            self.recipe_repo.remove(recipe)
        logger.info("Recipe %s deleted by user %s", recipe_id, user.id)
        return True

    def replace_ingredients(
        self, recipe_id: int, user: User, ingredients: List[IngredientLine]
    ) -> List[RecipeIngredient]:
        """
        Replace the whole ingredient list of a recipe.

        The list is stored in the given order; an empty list removes every
        ingredient.
        """
        self._get_editable(recipe_id, user, Action.EDIT_RECIPE)

        lines = [line.model_dump(by_alias=False) for line in ingredients]
        with unit_of_work(self.db, "save ingredients"):
            self.ingredient_repo.replace_for_recipe(recipe_id, lines)

        logger.info("Recipe %s ingredients replaced (%d lines)", recipe_id, len(lines))
        return self.ingredient_repo.get_by_recipe(recipe_id)

    def get_ingredients(self, recipe_id: int, user: User) -> List[RecipeIngredient]:
        self.get_recipe(recipe_id, user)
        return self.ingredient_repo.get_by_recipe(recipe_id)

    def update_macros(self, recipe_id: int, user: User, data: MacrosValues) -> RecipeMacros:
        self._get_editable(recipe_id, user, Action.EDIT_RECIPE)
        return self._save_macros(recipe_id, data.model_dump())

    def clear_macros(self, recipe_id: int, user: User) -> RecipeMacros:
        """Null out every macro value of a recipe."""
        self._get_editable(recipe_id, user, Action.EDIT_RECIPE)
        return self._save_macros(recipe_id, {field: None for field in MACRO_FIELDS})

    def get_macros(self, recipe_id: int, user: User) -> Optional[RecipeMacros]:
        self.get_recipe(recipe_id, user)
        return self.macros_repo.get_by_recipe(recipe_id)

    def _save_macros(self, recipe_id: int, values: dict) -> RecipeMacros:
        with unit_of_work(self.db, "save macros"):
            macros = self.macros_repo.upsert(recipe_id, values)

        self.db.refresh(macros)
        return macros

    def _get_editable(self, recipe_id: int, user: User, action: Action) -> Recipe:
        recipe = self.recipe_repo.get(recipe_id)
        if not recipe:
            raise ResourceNotFoundException("Recipe", recipe_id)

        if not policy.authorize(user, action, recipe):
            raise AuthorizationException(
                f"You are not allowed to {action.value.replace('_', ' ')} this recipe."
            )
        return recipe
