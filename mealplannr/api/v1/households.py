from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from mealplannr.database import get_db
from mealplannr.dependencies import get_current_user
from mealplannr.models.user import User
from mealplannr.schemas.household import (
    HouseholdCreate,
    HouseholdResponse,
    HouseholdMemberResponse,
    AddMemberRequest
)
from mealplannr.schemas.network import InvitationResponse
from mealplannr.schemas.result import Result
from mealplannr.services.household_service import HouseholdService
from mealplannr.services.membership_service import MembershipService

router = APIRouter()


@router.post("", response_model=Result[HouseholdResponse], status_code=status.HTTP_201_CREATED)
async def create_household(
    household_data: HouseholdCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new household with the current user as owner."""
    service = HouseholdService(db)
    household = service.create_household(current_user.id, household_data.name)
    return Result.successful(data=household)


@router.get("/my", response_model=Result[Optional[HouseholdResponse]])
async def get_my_household(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the household the current user belongs to (null if none)."""
    service = HouseholdService(db)
    return Result.successful(data=service.get_user_household(current_user.id))


@router.get("/invitations", response_model=Result[List[InvitationResponse]])
async def get_my_invitations(
    status: Optional[str] = Query("pending", description="pending, accepted, rejected or empty for all"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List network invitations for the household the current user owns.

    Users who own no household get an empty list.
    """
    household = HouseholdService(db).get_owned_household(current_user.id)
    if household is None:
        return Result.successful(data=[])

    service = MembershipService(db)
    invitations = service.get_household_invitations(household.id, status)
    return Result.successful(data=invitations)


@router.get("/{household_id}/members", response_model=Result[List[HouseholdMemberResponse]])
async def get_members(
    household_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all household members, owner first."""
    service = HouseholdService(db)
    members = service.get_members(household_id, current_user.id)
    return Result.successful(data=members)


@router.post(
    "/{household_id}/members",
    response_model=Result[HouseholdMemberResponse],
    status_code=status.HTTP_201_CREATED
)
async def add_member(
    household_id: int,
    member_data: AddMemberRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an existing user to the household by email (owner only)."""
    service = HouseholdService(db)
    member = service.add_member(household_id, current_user.id, member_data.email, member_data.role)
    return Result.successful(data=member)


@router.delete("/{household_id}/members/{user_id}", response_model=Result[dict])
async def remove_member(
    household_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a member from the household (owner only)."""
    service = HouseholdService(db)
    service.remove_member(household_id, current_user.id, user_id)
    return Result.successful(data={"message": "Member removed successfully"})
