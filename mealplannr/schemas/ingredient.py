from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class IngredientLine(BaseModel):
    """One ingredient line as sent by the recipe editor (camelCase accepted)."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    quantity_volume: Optional[float] = Field(None, alias="quantityVolume")
    unit_volume: Optional[str] = Field(None, alias="unitVolume", max_length=50)
    quantity_weight: Optional[float] = Field(None, alias="quantityWeight")
    unit_weight: Optional[str] = Field(None, alias="unitWeight", max_length=50)
    notes: Optional[str] = None


class IngredientBatchRequest(BaseModel):
    """Replaces the whole ingredient list of a recipe."""
    recipe_id: int = Field(..., gt=0)
    ingredients: List[IngredientLine] = Field(default_factory=list)


class IngredientResponse(BaseModel):
    id: int
    recipe_id: int
    name: str
    quantity_volume: Optional[float] = None
    unit_volume: Optional[str] = None
    quantity_weight: Optional[float] = None
    unit_weight: Optional[str] = None
    notes: Optional[str] = None
    sort_order: int

    class Config:
        from_attributes = True
