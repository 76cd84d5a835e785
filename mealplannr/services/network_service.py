import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from mealplannr.config import settings
from mealplannr.database import unit_of_work
from mealplannr.models.base import utc_now
from mealplannr.models.network import Network, NetworkHousehold, NetworkRole, InvitationStatus
from mealplannr.repositories.household_repository import HouseholdRepository
from mealplannr.repositories.network_repository import NetworkRepository
from mealplannr.utils.security import create_invitation_token, verify_invitation_token
from mealplannr.core.exception import (
    ResourceNotFoundException,
    ConflictException,
    ValidationException,
    AuthorizationException
)

logger = logging.getLogger(__name__)

INVITATION_ACTIONS = ("accept", "reject")


def invitation_link(invitation_id: int, action: str) -> str:
    """Build the emailed accept/reject URL for an invitation."""
    token = create_invitation_token(invitation_id, action)
    return (
        f"{settings.APP_BASE_URL.rstrip('/')}{settings.API_V1_STR}"
        f"/invitations/{invitation_id}/{action}/confirm?token={token}"
    )


class NetworkService:
    """
    Network lifecycle and the invitation state machine.

    A household's link to a network starts out pending when it is invited and
    is accepted or rejected exactly once by that household's owner. At most
    MAX_HOUSEHOLDS_PER_NETWORK links per network are ever accepted.
    """

    def __init__(self, db: Session, mailer=None):
        """
        Args:
            db: Database session
            mailer: Object with a ``send(to_email, subject, body)`` method;
                notifications are skipped when None
        """
        self.db = db
        self.mailer = mailer
        self.network_repo = NetworkRepository(db)
        self.household_repo = HouseholdRepository(db)

    def create_network(self, name: str, user_id: int) -> Network:
        """
        Create a network owned by the user's household.

        Raises:
            ValidationException: If the user owns no household or the name is blank
        """
        household = self.household_repo.get_owned_household(user_id)
        if not household:
            raise ValidationException(
                "You must own a household to create a network.", code="NoHousehold"
            )

        name = name.strip()
        if not name:
            raise ValidationException("Network name is required.", field="name")

        with unit_of_work(self.db, "create network"):
            network = self.network_repo.add(Network(name=name, created_by=user_id))
            self.network_repo.add_link(
                network.id,
                household.id,
                role=NetworkRole.OWNER,
                status=InvitationStatus.ACCEPTED,
                joined_at=utc_now()
            )

        self.db.refresh(network)
        logger.info("Network %s created by user %s (household %s)", network.id, user_id, household.id)
        return network

    def get_network(self, network_id: int) -> Network:
        network = self.network_repo.get(network_id)
        if not network:
            raise ResourceNotFoundException("Network", network_id)
        return network

    def get_user_networks(self, user_id: int) -> List[dict]:
        """Networks the user's household has joined, with household counts, newest first."""
        household_id = self.household_repo.get_user_household_id(user_id)
        if household_id is None:
            return []
        return self.network_repo.get_household_networks(household_id)

    def invite_household(self, network_id: int, household_id: int, inviter_user_id: int) -> NetworkHousehold:
        """
        Invite a household to a network.

        Any existing link blocks a new invitation, including a rejected one.

        Raises:
            ResourceNotFoundException: If the network or household does not exist
            AuthorizationException: If the inviter did not create the network
            ConflictException: If the network is full or the household is already linked
        """
        network = self.get_network(network_id)

        if network.created_by != inviter_user_id:
            raise AuthorizationException(
                "Only the network owner can send invitations.", code="NotOwner"
            )

        if self.network_repo.count_accepted(network_id) >= settings.MAX_HOUSEHOLDS_PER_NETWORK:
            raise ConflictException(
                f"Network has reached the maximum of {settings.MAX_HOUSEHOLDS_PER_NETWORK} households.",
                code="NetworkFull"
            )

        if self.network_repo.get_link(network_id, household_id):
            raise ConflictException(
                "Household is already linked to this network.", code="AlreadyLinked"
            )

        if not self.household_repo.exists(household_id):
            raise ResourceNotFoundException("Household", household_id)

        with unit_of_work(self.db, "create invitation"):
            link = self.network_repo.add_link(network_id, household_id)

        self.db.refresh(link)
        logger.info("Household %s invited to network %s (invitation %s)", household_id, network_id, link.id)
        self._send_invitation_email(link, network)
        return link

    def accept_invitation(self, invitation_id: int, user_id: int) -> NetworkHousehold:
        """
        Accept a pending invitation on behalf of the invited household.

        The network row is locked while the accepted households are counted,
        and the status change only applies to a still-pending row.

        Raises:
            ResourceNotFoundException: If the invitation does not exist
            AuthorizationException: If the user does not own the invited household
            ConflictException: If the invitation is resolved or the network is full
        """
        link = self._get_actionable_invitation(invitation_id, user_id)

        with unit_of_work(self.db, "accept invitation"):
            self.network_repo.lock(link.network_id)

            if self.network_repo.count_accepted(link.network_id) >= settings.MAX_HOUSEHOLDS_PER_NETWORK:
                raise ConflictException(
                    "Network has reached the maximum number of households.", code="NetworkFull"
                )

            updated = self.network_repo.resolve_pending(
                link.id, InvitationStatus.ACCEPTED, joined_at=utc_now()
            )
            if not updated:
                raise ConflictException(
                    "Invitation has already been resolved.", code="AlreadyResolved"
                )

        self.db.refresh(link)
        logger.info("Invitation %s accepted by user %s", invitation_id, user_id)
        return link

    def reject_invitation(self, invitation_id: int, user_id: int) -> NetworkHousehold:
        """
        Reject a pending invitation on behalf of the invited household.

        Raises:
            ResourceNotFoundException: If the invitation does not exist
            AuthorizationException: If the user does not own the invited household
            ConflictException: If the invitation is already resolved
        """
        link = self._get_actionable_invitation(invitation_id, user_id)

        with unit_of_work(self.db, "reject invitation"):
            updated = self.network_repo.resolve_pending(link.id, InvitationStatus.REJECTED)
            if not updated:
                raise ConflictException(
                    "Invitation has already been resolved.", code="AlreadyResolved"
                )

        self.db.refresh(link)
        logger.info("Invitation %s rejected by user %s", invitation_id, user_id)
        return link

    def resolve_invitation_link(
        self, invitation_id: int, action: str, token: str, user_id: int
    ) -> NetworkHousehold:
        """
        Resolve an invitation from an emailed link.

        Raises:
            ValidationException: If the action is unknown or the token does not
                match this invitation and action
        """
        if action not in INVITATION_ACTIONS:
            raise ValidationException(
                "Action must be 'accept' or 'reject'.", field="action", code="InvalidAction"
            )

        if not verify_invitation_token(token, invitation_id, action):
            raise ValidationException(
                "Invitation link is invalid or has expired.", code="InvalidToken"
            )

        if action == "accept":
            return self.accept_invitation(invitation_id, user_id)
        return self.reject_invitation(invitation_id, user_id)

    def remove_household(self, network_id: int, household_id: int, remover_user_id: int) -> bool:
        """
        Remove a household from a network, whatever the status of its link.

        Raises:
            ResourceNotFoundException: If the network or the link does not exist
            AuthorizationException: If the remover did not create the network
            ValidationException: If the household owns the network
        """
        network = self.get_network(network_id)

        if network.created_by != remover_user_id:
            raise AuthorizationException(
                "Only the network owner can remove households.", code="NotOwner"
            )

        owner_link = self.network_repo.get_owner_link(network_id)
        if owner_link and owner_link.household_id == household_id:
            raise ValidationException(
                "The network owner's household cannot be removed.", code="CannotRemoveOwner"
            )

        with unit_of_work(self.db, "remove household from network"):
            removed = self.network_repo.delete_link(network_id, household_id)
            if not removed:
                raise ResourceNotFoundException("Network household", household_id)

        logger.info("Household %s removed from network %s", household_id, network_id)
        self._send_removal_email(network, household_id)
        return True

    def _get_actionable_invitation(self, invitation_id: int, user_id: int) -> NetworkHousehold:
        link = self.network_repo.get_link_by_id(invitation_id)
        if not link:
            raise ResourceNotFoundException("Invitation", invitation_id)

        owner = self.household_repo.get_household_owner(link.household_id)
        if owner is None or owner.id != user_id:
            raise AuthorizationException(
                "Only the household owner can respond to invitations."
            )

        if link.status != InvitationStatus.PENDING:
            raise ConflictException(
                f"Invitation has already been {link.status.value}.", code="AlreadyResolved"
            )

        return link

    def _send_invitation_email(self, link: NetworkHousehold, network: Network) -> None:
        if self.mailer is None:
            return

        owner = self.household_repo.get_household_owner(link.household_id)
        if owner is None:
            logger.warning("Household %s has no owner; invitation %s not emailed", link.household_id, link.id)
            return

        body = (
            f"You have been invited to join the network '{network.name}'.\n\n"
            f"Accept: {invitation_link(link.id, 'accept')}\n"
            f"Reject: {invitation_link(link.id, 'reject')}\n"
        )
        self.mailer.send(owner.email, f"Network Invitation: {network.name}", body)

    def _send_removal_email(self, network: Network, household_id: int) -> None:
        if self.mailer is None:
            return

        owner = self.household_repo.get_household_owner(household_id)
        if owner is None:
            return

        body = f"Your household has been removed from the network '{network.name}'.\n"
        self.mailer.send(owner.email, f"Removed from Network: {network.name}", body)
