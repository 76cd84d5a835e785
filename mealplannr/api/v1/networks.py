from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from mealplannr.database import get_db
from mealplannr.dependencies import get_current_user, get_mailer
from mealplannr.models.user import User
from mealplannr.schemas.network import (
    NetworkCreate,
    NetworkResponse,
    NetworkSummary,
    InviteHouseholdRequest,
    NetworkLinkResponse,
    NetworkHouseholdResponse
)
from mealplannr.schemas.result import Result
from mealplannr.services.email_service import BackgroundMailer
from mealplannr.services.membership_service import MembershipService
from mealplannr.services.network_service import NetworkService

router = APIRouter()


@router.post("", response_model=Result[NetworkResponse], status_code=status.HTTP_201_CREATED)
async def create_network(
    network_data: NetworkCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a network owned by the current user's household."""
    service = NetworkService(db)
    network = service.create_network(network_data.name, current_user.id)
    return Result.successful(data=network)


@router.get("/my", response_model=Result[List[NetworkSummary]])
async def get_my_networks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the networks the current user's household has joined."""
    service = NetworkService(db)
    return Result.successful(data=service.get_user_networks(current_user.id))


@router.post(
    "/{network_id}/invite",
    response_model=Result[NetworkLinkResponse],
    status_code=status.HTTP_201_CREATED
)
async def invite_household(
    network_id: int,
    invite_data: InviteHouseholdRequest,
    current_user: User = Depends(get_current_user),
    mailer: BackgroundMailer = Depends(get_mailer),
    db: Session = Depends(get_db)
):
    """
    Invite a household to the network (network owner only).

    The invited household's owner is emailed accept and reject links.
    """
    service = NetworkService(db, mailer)
    invitation = service.invite_household(network_id, invite_data.household_id, current_user.id)
    return Result.successful(data=invitation)


@router.get("/{network_id}/households", response_model=Result[List[NetworkHouseholdResponse]])
async def get_network_households(
    network_id: int,
    status: Optional[str] = Query(None, description="pending, accepted or rejected"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the households linked to a network, newest invitation first."""
    NetworkService(db).get_network(network_id)
    service = MembershipService(db)
    return Result.successful(data=service.get_network_households(network_id, status))


@router.delete("/{network_id}/households/{household_id}", response_model=Result[dict])
async def remove_household(
    network_id: int,
    household_id: int,
    current_user: User = Depends(get_current_user),
    mailer: BackgroundMailer = Depends(get_mailer),
    db: Session = Depends(get_db)
):
    """Remove a household from the network (network owner only)."""
    service = NetworkService(db, mailer)
    service.remove_household(network_id, household_id, current_user.id)
    return Result.successful(data={"message": "Household removed from network successfully"})
