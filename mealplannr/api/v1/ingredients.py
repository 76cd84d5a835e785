from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from mealplannr.database import get_db
from mealplannr.dependencies import get_current_user
from mealplannr.models.user import User
from mealplannr.schemas.ingredient import IngredientBatchRequest, IngredientResponse
from mealplannr.schemas.result import Result
from mealplannr.services.recipe_service import RecipeService

router = APIRouter()


@router.post("/batch", response_model=Result[List[IngredientResponse]])
async def batch_update_ingredients(
    batch: IngredientBatchRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Replace every ingredient of a recipe with the given list.

    Sent by the recipe editor on save. Lines keep the order they are sent in;
    an empty list removes all ingredients.
    """
    service = RecipeService(db)
    ingredients = service.replace_ingredients(batch.recipe_id, current_user, batch.ingredients)
    return Result.successful(data=ingredients)
