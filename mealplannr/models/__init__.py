from mealplannr.models.base import Base, BaseModel
from mealplannr.models.user import User
from mealplannr.models.household import Household, HouseholdMember, HouseholdRole
from mealplannr.models.network import Network, NetworkHousehold, NetworkRole, InvitationStatus
from mealplannr.models.recipe import (
    Recipe,
    RecipeShare,
    RecipeMacros,
    RecipeIngredient,
    RecipeStatus,
    Visibility,
)

__all__ = [
    # Base
    "Base",
    "BaseModel",
    # User
    "User",
    # Household
    "Household",
    "HouseholdMember",
    "HouseholdRole",
    # Network
    "Network",
    "NetworkHousehold",
    "NetworkRole",
    "InvitationStatus",
    # Recipe
    "Recipe",
    "RecipeShare",
    "RecipeMacros",
    "RecipeIngredient",
    "RecipeStatus",
    "Visibility",
]
