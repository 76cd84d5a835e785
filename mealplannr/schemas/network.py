from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from mealplannr.models.network import NetworkRole, InvitationStatus


class NetworkCreate(BaseModel):
    """Schema for creating a network owned by the caller's household."""
    name: str = Field(..., min_length=1, max_length=255, description="Network name")


class NetworkResponse(BaseModel):
    id: int
    uuid: str
    name: str
    created_by: int
    created_at: datetime

    class Config:
        from_attributes = True


class NetworkSummary(BaseModel):
    """A network as seen from one of its member households."""
    id: int
    name: str
    created_by: int
    created_at: datetime
    role: NetworkRole
    household_count: int


class InviteHouseholdRequest(BaseModel):
    household_id: int = Field(..., gt=0, description="Household to invite")


class NetworkLinkResponse(BaseModel):
    """A household's link to a network; pending links are invitations."""
    id: int
    network_id: int
    household_id: int
    role: NetworkRole
    status: InvitationStatus
    invited_at: datetime
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NetworkHouseholdResponse(NetworkLinkResponse):
    household_name: str
    household_owner: int


class InvitationResponse(NetworkLinkResponse):
    network_name: str
    network_owner: Optional[int] = None
    household_name: Optional[str] = None
