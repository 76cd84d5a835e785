from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from mealplannr.models.household import HouseholdRole


class HouseholdCreate(BaseModel):
    """Schema for creating a new household."""
    name: str = Field(..., min_length=1, max_length=255, description="Household name")


class HouseholdResponse(BaseModel):
    """Schema for household response."""
    id: int
    uuid: str
    name: str
    created_by: int
    max_members: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class HouseholdMemberResponse(BaseModel):
    """Schema for household member information."""
    user_id: int
    username: str
    display_name: str
    email: str
    role: HouseholdRole
    invited_at: Optional[datetime] = None
    joined_at: datetime


class AddMemberRequest(BaseModel):
    """Schema for adding an existing user to a household by email."""
    email: EmailStr
    role: HouseholdRole = Field(
        HouseholdRole.MEMBER, description="One of 'member', 'manager' or 'child'"
    )
