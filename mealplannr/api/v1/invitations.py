from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Literal

from mealplannr.database import get_db
from mealplannr.dependencies import get_current_user
from mealplannr.models.user import User
from mealplannr.schemas.network import NetworkLinkResponse
from mealplannr.schemas.result import Result
from mealplannr.services.network_service import NetworkService

router = APIRouter()


@router.post("/{invitation_id}/{action}", response_model=Result[NetworkLinkResponse])
async def resolve_invitation(
    invitation_id: int,
    action: Literal["accept", "reject"],
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Accept or reject a network invitation (invited household's owner only)."""
    service = NetworkService(db)
    if action == "accept":
        invitation = service.accept_invitation(invitation_id, current_user.id)
    else:
        invitation = service.reject_invitation(invitation_id, current_user.id)
    return Result.successful(data=invitation)


@router.get("/{invitation_id}/{action}/confirm", response_model=Result[NetworkLinkResponse])
async def confirm_invitation_link(
    invitation_id: int,
    action: str,
    token: str = Query(..., min_length=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Resolve an invitation from the link in the invitation email."""
    service = NetworkService(db)
    invitation = service.resolve_invitation_link(invitation_id, action, token, current_user.id)
    return Result.successful(data=invitation)
