from sqlalchemy.orm import Session
from typing import List, Optional, Union
from mealplannr.models.network import InvitationStatus
from mealplannr.repositories.network_repository import NetworkRepository
from mealplannr.core.exception import ValidationException

StatusFilter = Optional[Union[str, InvitationStatus]]


def parse_status(status: StatusFilter) -> Optional[InvitationStatus]:
    """Turn an optional status filter into an InvitationStatus; empty means no filter."""
    if status is None or status == "":
        return None
    if isinstance(status, InvitationStatus):
        return status
    try:
        return InvitationStatus(status)
    except ValueError:
        raise ValidationException(
            f"Unknown status '{status}'. Use pending, accepted or rejected.",
            field="status",
            code="InvalidStatus"
        )


class MembershipService:
    """Read side of network membership: invitation and link listings."""

    def __init__(self, db: Session):
        self.db = db
        self.network_repo = NetworkRepository(db)

    def get_network_households(self, network_id: int, status: StatusFilter = None) -> List[dict]:
        """Households linked to a network, newest invitation first."""
        return self.network_repo.get_network_households(network_id, parse_status(status))

    def get_household_invitations(
        self, household_id: int, status: StatusFilter = InvitationStatus.PENDING
    ) -> List[dict]:
        """Networks a household has been invited to, newest first; pending only by default."""
        return self.network_repo.get_household_invitations(household_id, parse_status(status))

    def get_invitation(self, invitation_id: int) -> Optional[dict]:
        return self.network_repo.get_invitation(invitation_id)
