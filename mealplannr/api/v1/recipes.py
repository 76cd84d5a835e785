from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from mealplannr.config import settings
from mealplannr.database import get_db
from mealplannr.dependencies import get_current_user
from mealplannr.models.user import User
from mealplannr.schemas.ingredient import IngredientResponse
from mealplannr.schemas.recipe import (
    RecipeCreate,
    RecipeResponse,
    SharingUpdate,
    SharingResponse,
    MacrosUpdate,
    MacrosResponse
)
from mealplannr.schemas.result import Result
from mealplannr.services.recipe_access_service import RecipeAccessService
from mealplannr.services.recipe_service import RecipeService

router = APIRouter()


@router.post("", response_model=Result[RecipeResponse], status_code=status.HTTP_201_CREATED)
async def create_recipe(
    recipe_data: RecipeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new recipe authored by the current user."""
    service = RecipeService(db)
    recipe = service.create_recipe(current_user, recipe_data)
    return Result.successful(data=recipe)


@router.get("", response_model=Result[List[RecipeResponse]])
async def get_my_recipes(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all recipes created by current user."""
    service = RecipeService(db)
    recipes = service.list_my_recipes(current_user, skip, limit)
    return Result.successful(data=recipes)


@router.get("/accessible", response_model=Result[List[RecipeResponse]])
async def get_accessible_recipes(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Published recipes the current user may read, newest first.

    Includes the user's own recipes, public recipes, recipes shared with the
    user's household and recipes shared with networks the household belongs to.
    """
    service = RecipeAccessService(db)
    recipes = service.get_accessible_recipes(
        current_user.id, limit or settings.ACCESSIBLE_RECIPES_DEFAULT_LIMIT
    )
    return Result.successful(data=recipes)


@router.get("/{recipe_id}", response_model=Result[RecipeResponse])
async def get_recipe(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a recipe the current user may read."""
    service = RecipeService(db)
    return Result.successful(data=service.get_recipe(recipe_id, current_user))


@router.delete("/{recipe_id}", response_model=Result[dict])
async def delete_recipe(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a recipe."""
    service = RecipeService(db)
    service.delete_recipe(recipe_id, current_user)
    return Result.successful(data={"message": "Recipe deleted successfully"})


@router.post("/{recipe_id}/sharing", response_model=Result[SharingResponse])
async def set_recipe_sharing(
    recipe_id: int,
    sharing_data: SharingUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Set who may read a recipe (author only).

    - **visibility**: private, household, network or public
    - **household_id**: required for household visibility
    - **network_id**: required for network visibility
    """
    service = RecipeAccessService(db)
    service.set_sharing(
        recipe_id,
        sharing_data.visibility,
        current_user.id,
        household_id=sharing_data.household_id,
        network_id=sharing_data.network_id
    )
    return Result.successful(data=service.get_sharing(recipe_id))


@router.get("/{recipe_id}/sharing", response_model=Result[SharingResponse])
async def get_recipe_sharing(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a recipe's sharing settings; unshared recipes read as private."""
    service = RecipeAccessService(db)
    return Result.successful(data=service.get_sharing(recipe_id))


@router.get("/{recipe_id}/ingredients", response_model=Result[List[IngredientResponse]])
async def get_recipe_ingredients(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = RecipeService(db)
    return Result.successful(data=service.get_ingredients(recipe_id, current_user))


@router.post("/{recipe_id}/macros", response_model=Result[MacrosResponse])
async def update_recipe_macros(
    recipe_id: int,
    macros_data: MacrosUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Save protein, carbs, fat and calories for a recipe."""
    service = RecipeService(db)
    macros = service.update_macros(recipe_id, current_user, macros_data.data)
    return Result.successful(data=macros)


@router.delete("/{recipe_id}/macros", response_model=Result[MacrosResponse])
async def clear_recipe_macros(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Clear all macro values of a recipe."""
    service = RecipeService(db)
    return Result.successful(data=service.clear_macros(recipe_id, current_user))


@router.get("/{recipe_id}/macros", response_model=Result[Optional[MacrosResponse]])
async def get_recipe_macros(
    recipe_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = RecipeService(db)
    return Result.successful(data=service.get_macros(recipe_id, current_user))
