from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from mealplannr.models.recipe import RecipeStatus, Visibility


class RecipeCreate(BaseModel):
    """Schema for creating a recipe."""
    title: str = Field(..., min_length=1, max_length=200)
    content: Optional[str] = None
    status: RecipeStatus = RecipeStatus.PUBLISH


class RecipeResponse(BaseModel):
    """Schema for recipe response."""
    id: int
    uuid: str
    title: str
    content: Optional[str] = None
    status: RecipeStatus
    author_id: int
    visibility: Visibility
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SharingUpdate(BaseModel):
    """
    Sharing settings sent by the author.

    household_id is required for 'household' visibility and network_id for
    'network' visibility; the other one is ignored.
    """
    visibility: str = Field(..., description="private, household, network or public")
    household_id: Optional[int] = None
    network_id: Optional[int] = None


class SharingResponse(BaseModel):
    visibility: Visibility
    household_id: Optional[int] = None
    network_id: Optional[int] = None


class MacrosValues(BaseModel):
    protein: float
    carbs: float
    fat: float
    calories: float


class MacrosUpdate(BaseModel):
    data: MacrosValues


class MacrosResponse(BaseModel):
    recipe_id: int
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    calories: Optional[float] = None

    class Config:
        from_attributes = True
