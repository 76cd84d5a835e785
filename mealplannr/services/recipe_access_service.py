import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from mealplannr.config import settings
from mealplannr.database import unit_of_work
from mealplannr.models.recipe import Recipe, RecipeShare, Visibility
from mealplannr.repositories.household_repository import HouseholdRepository
from mealplannr.repositories.network_repository import NetworkRepository
from mealplannr.repositories.recipe_repository import RecipeRepository
from mealplannr.repositories.recipe_share_repository import RecipeShareRepository
from mealplannr.core.exception import (
    ResourceNotFoundException,
    ValidationException,
    AuthorizationException
)

logger = logging.getLogger(__name__)


class RecipeAccessService:
    """
    Decides who may read a recipe and manages its sharing settings.

    A recipe without sharing settings is private to its author. The author
    can always read their own recipe whatever its visibility.
    """

    def __init__(self, db: Session):
        self.db = db
        self.recipe_repo = RecipeRepository(db)
        self.share_repo = RecipeShareRepository(db)
        self.household_repo = HouseholdRepository(db)
        self.network_repo = NetworkRepository(db)

    def can_access(self, recipe_id: int, user_id: int) -> bool:
        recipe = self.recipe_repo.get(recipe_id)
        if not recipe:
            return False
        return self.can_access_recipe(recipe, user_id)

    def can_access_recipe(self, recipe: Recipe, user_id: int) -> bool:
        if recipe.author_id == user_id:
            return True

        share = self.share_repo.get_by_recipe(recipe.id)
        if share is None:
            return False

        if share.visibility == Visibility.PUBLIC:
            return True
        if share.visibility == Visibility.HOUSEHOLD:
            return share.household_id is not None and self.household_repo.is_member(share.household_id, user_id)
        if share.visibility == Visibility.NETWORK:
            return share.network_id is not None and self._is_in_network(share.network_id, user_id)
        return False

    def set_sharing(
        self,
        recipe_id: int,
        visibility: str,
        user_id: int,
        household_id: Optional[int] = None,
        network_id: Optional[int] = None
    ) -> RecipeShare:
        """
        Set who may read a recipe.

        Args:
            recipe_id: The recipe
            visibility: One of private, household, network, public
            user_id: The acting user, who must be the author
            household_id: Target household, required for household visibility
            network_id: Target network, required for network visibility

        Raises:
            ResourceNotFoundException: If the recipe does not exist
            AuthorizationException: If the user is not the author, or is not part of the target
            ValidationException: If the visibility is unknown or its target is missing
        """
        recipe = self.recipe_repo.get(recipe_id)
        if not recipe:
            raise ResourceNotFoundException("Recipe", recipe_id)

        if recipe.author_id != user_id:
            raise AuthorizationException("Only the author can change sharing settings.")

        try:
            visibility = Visibility(visibility)
        except ValueError:
            raise ValidationException(
                f"Unknown visibility '{visibility}'. Use private, household, network or public.",
                field="visibility",
                code="InvalidVisibility"
            )

        if visibility == Visibility.HOUSEHOLD:
            if not household_id:
                raise ValidationException(
                    "household_id is required for household visibility.",
                    field="household_id",
                    code="MissingHousehold"
                )
            if not self.household_repo.is_member(household_id, user_id):
                raise AuthorizationException("You are not a member of that household.")

        if visibility == Visibility.NETWORK:
            if not network_id:
                raise ValidationException(
                    "network_id is required for network visibility.",
                    field="network_id",
                    code="MissingNetwork"
                )
            if not self._is_in_network(network_id, user_id):
                raise AuthorizationException("Your household is not part of that network.")

        with unit_of_work(self.db, "save sharing settings"):
            share = self.share_repo.upsert(
                recipe_id,
                visibility,
                household_id=household_id if visibility == Visibility.HOUSEHOLD else None,
                network_id=network_id if visibility == Visibility.NETWORK else None
            )

        self.db.refresh(share)
        logger.info("Recipe %s visibility set to %s", recipe_id, visibility.value)
        return share

    def get_sharing(self, recipe_id: int) -> dict:
        share = self.share_repo.get_by_recipe(recipe_id)
        if share is None:
            return {"visibility": Visibility.PRIVATE, "household_id": None, "network_id": None}

        return {
            "visibility": share.visibility,
            "household_id": share.household_id,
            "network_id": share.network_id,
        }

    def get_accessible_recipes(self, user_id: int, limit: Optional[int] = None) -> List[Recipe]:
        """Published recipes the user may read, newest first."""
        return self.recipe_repo.get_accessible(
            user_id,
            household_id=self.household_repo.get_user_household_id(user_id),
            limit=limit,
            unshared_public=settings.UNSHARED_RECIPES_PUBLIC
        )

    def _is_in_network(self, network_id: int, user_id: int) -> bool:
        household_id = self.household_repo.get_user_household_id(user_id)
        if household_id is None:
            return False
        return self.network_repo.has_accepted_link(network_id, household_id)
