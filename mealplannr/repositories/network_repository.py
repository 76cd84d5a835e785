from sqlalchemy.orm import Session
from sqlalchemy import select, update, delete, and_, func
from typing import List, Optional
from datetime import datetime
from mealplannr.models.household import Household
from mealplannr.models.network import Network, NetworkHousehold, NetworkRole, InvitationStatus
from mealplannr.repositories.repository import BaseRepository


def _link_dict(link: NetworkHousehold) -> dict:
    return {
        "id": link.id,
        "network_id": link.network_id,
        "household_id": link.household_id,
        "role": link.role,
        "status": link.status,
        "invited_at": link.invited_at,
        "joined_at": link.joined_at,
    }


class NetworkRepository(BaseRepository[Network]):
    """
    Repository for networks and their household links.

    A link row doubles as the invitation record: it is created pending and
    resolved once. Link writes only flush; the service commits.
    """

    def __init__(self, db: Session):
        super().__init__(Network, db)

    def lock(self, network_id: int) -> Optional[Network]:
        """Load a network with a row lock (SELECT ... FOR UPDATE where supported)."""
        stmt = select(Network).where(Network.id == network_id).with_for_update()
        return self.db.execute(stmt).scalars().first()

    def get_link(self, network_id: int, household_id: int) -> Optional[NetworkHousehold]:
        """Get the link between a network and a household, in any status."""
        stmt = select(NetworkHousehold).where(
            and_(
                NetworkHousehold.network_id == network_id,
                NetworkHousehold.household_id == household_id
            )
        )
        return self.db.execute(stmt).scalars().first()

    def get_link_by_id(self, link_id: int) -> Optional[NetworkHousehold]:
        return self.db.get(NetworkHousehold, link_id)

    def get_owner_link(self, network_id: int) -> Optional[NetworkHousehold]:
        """Get the link of the household that owns a network."""
        stmt = select(NetworkHousehold).where(
            and_(
                NetworkHousehold.network_id == network_id,
                NetworkHousehold.role == NetworkRole.OWNER
            )
        )
        return self.db.execute(stmt).scalars().first()

    def add_link(
        self,
        network_id: int,
        household_id: int,
        role: NetworkRole = NetworkRole.MEMBER,
        status: InvitationStatus = InvitationStatus.PENDING,
        joined_at: Optional[datetime] = None
    ) -> NetworkHousehold:
        link = NetworkHousehold(
            network_id=network_id,
            household_id=household_id,
            role=role,
            status=status,
            joined_at=joined_at
        )
        self.db.add(link)
        self.db.flush()
        return link

    def resolve_pending(
        self,
        link_id: int,
        status: InvitationStatus,
        joined_at: Optional[datetime] = None
    ) -> int:
        """
        Move a pending link to a terminal status.

        The update is conditional on the row still being pending, so a link
        that was resolved concurrently is left untouched.

        Returns:
            Number of rows updated (0 or 1)
        """
        values = {"status": status}
        if joined_at is not None:
            values["joined_at"] = joined_at

        stmt = (
            update(NetworkHousehold)
            .where(
                and_(
                    NetworkHousehold.id == link_id,
                    NetworkHousehold.status == InvitationStatus.PENDING
                )
            )
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        self.db.flush()
        return result.rowcount

    def delete_link(self, network_id: int, household_id: int) -> bool:
        stmt = delete(NetworkHousehold).where(
            and_(
                NetworkHousehold.network_id == network_id,
                NetworkHousehold.household_id == household_id
            )
        )
        result = self.db.execute(stmt)
        self.db.flush()
        return result.rowcount > 0

    def count_accepted(self, network_id: int) -> int:
        """Count households whose link to a network is accepted."""
        stmt = select(func.count(NetworkHousehold.id)).where(
            and_(
                NetworkHousehold.network_id == network_id,
                NetworkHousehold.status == InvitationStatus.ACCEPTED
            )
        )
        return self.db.execute(stmt).scalar_one()

    def has_accepted_link(self, network_id: int, household_id: int) -> bool:
        """Check if a household has an accepted link to a network."""
        link = self.get_link(network_id, household_id)
        return link is not None and link.status == InvitationStatus.ACCEPTED

    def get_network_households(
        self,
        network_id: int,
        status: Optional[InvitationStatus] = None
    ) -> List[dict]:
        """
        Get the household links of a network with household name and owner.

        Args:
            network_id: The network ID
            status: Only return links in this status when given
        """
        stmt = (
            select(NetworkHousehold, Household.name, Household.created_by)
            .join(Household, NetworkHousehold.household_id == Household.id)
            .where(NetworkHousehold.network_id == network_id)
        )
        if status is not None:
            stmt = stmt.where(NetworkHousehold.status == status)
        stmt = stmt.order_by(NetworkHousehold.invited_at.desc(), NetworkHousehold.id.desc())

        return [
            {**_link_dict(link), "household_name": name, "household_owner": owner}
            for link, name, owner in self.db.execute(stmt).all()
        ]

    def get_household_invitations(
        self,
        household_id: int,
        status: Optional[InvitationStatus] = InvitationStatus.PENDING
    ) -> List[dict]:
        """
        Get the network links of a household with network name and owner.

        Args:
            household_id: The household ID
            status: Only return links in this status when given
        """
        stmt = (
            select(NetworkHousehold, Network.name, Network.created_by)
            .join(Network, NetworkHousehold.network_id == Network.id)
            .where(NetworkHousehold.household_id == household_id)
        )
        if status is not None:
            stmt = stmt.where(NetworkHousehold.status == status)
        stmt = stmt.order_by(NetworkHousehold.invited_at.desc(), NetworkHousehold.id.desc())

        return [
            {**_link_dict(link), "network_name": name, "network_owner": owner}
            for link, name, owner in self.db.execute(stmt).all()
        ]

    def get_invitation(self, invitation_id: int) -> Optional[dict]:
        """Get a single link with its network and household names."""
        stmt = (
            select(NetworkHousehold, Network.name, Household.name)
            .join(Network, NetworkHousehold.network_id == Network.id)
            .join(Household, NetworkHousehold.household_id == Household.id)
            .where(NetworkHousehold.id == invitation_id)
        )
        row = self.db.execute(stmt).first()
        if row is None:
            return None

        link, network_name, household_name = row
        return {**_link_dict(link), "network_name": network_name, "household_name": household_name}

    def get_household_networks(self, household_id: int) -> List[dict]:
        """
        Get the networks a household has an accepted link to, newest first.

        Each entry carries the network's accepted household count and the
        household's role in it.
        """
        accepted_counts = (
            select(
                NetworkHousehold.network_id,
                func.count(NetworkHousehold.id).label("household_count")
            )
            .where(NetworkHousehold.status == InvitationStatus.ACCEPTED)
            .group_by(NetworkHousehold.network_id)
            .subquery()
        )

        stmt = (
            select(Network, NetworkHousehold.role, accepted_counts.c.household_count)
            .join(NetworkHousehold, NetworkHousehold.network_id == Network.id)
            .join(accepted_counts, accepted_counts.c.network_id == Network.id)
            .where(
                and_(
                    NetworkHousehold.household_id == household_id,
                    NetworkHousehold.status == InvitationStatus.ACCEPTED
                )
            )
            .order_by(Network.created_at.desc(), Network.id.desc())
        )

        return [
            {
                "id": network.id,
                "name": network.name,
                "created_by": network.created_by,
                "created_at": network.created_at,
                "role": role,
                "household_count": count,
            }
            for network, role, count in self.db.execute(stmt).all()
        ]
