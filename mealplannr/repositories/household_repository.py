from sqlalchemy.orm import Session
from sqlalchemy import select, and_, delete, func, case
from typing import List, Optional
from datetime import datetime
from mealplannr.models.household import Household, HouseholdMember, HouseholdRole
from mealplannr.models.user import User
from mealplannr.repositories.repository import BaseRepository


class HouseholdRepository(BaseRepository[Household]):
    """Repository for household and household membership operations.

    Membership writes only flush; callers commit through a unit of work.
    """

    def __init__(self, db: Session):
        super().__init__(Household, db)

    def get_user_household(self, user_id: int) -> Optional[Household]:
        """Get the household a user belongs to, in any role."""
        stmt = (
            select(Household)
            .join(HouseholdMember, HouseholdMember.household_id == Household.id)
            .where(HouseholdMember.user_id == user_id)
            .order_by(HouseholdMember.id)
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def get_user_household_id(self, user_id: int) -> Optional[int]:
        """Get the id of the household a user belongs to, in any role."""
        stmt = (
            select(HouseholdMember.household_id)
            .where(HouseholdMember.user_id == user_id)
            .order_by(HouseholdMember.id)
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_owned_household(self, user_id: int) -> Optional[Household]:
        """Get the household a user owns."""
        stmt = (
            select(Household)
            .join(HouseholdMember, HouseholdMember.household_id == Household.id)
            .where(
                and_(
                    HouseholdMember.user_id == user_id,
                    HouseholdMember.role == HouseholdRole.OWNER
                )
            )
            .order_by(HouseholdMember.id)
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def get_household_owner(self, household_id: int) -> Optional[User]:
        """Get the owning user of a household."""
        stmt = (
            select(User)
            .join(HouseholdMember, HouseholdMember.user_id == User.id)
            .where(
                and_(
                    HouseholdMember.household_id == household_id,
                    HouseholdMember.role == HouseholdRole.OWNER
                )
            )
            .order_by(HouseholdMember.id)
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def add_member(
        self,
        household_id: int,
        user_id: int,
        role: HouseholdRole = HouseholdRole.MEMBER,
        invited_at: Optional[datetime] = None
    ) -> HouseholdMember:
        """
        Add a member to a household.

        Args:
            household_id: The household ID
            user_id: The user ID to add
            role: Role in the household
            invited_at: When the member was invited, if they were
        """
        member = HouseholdMember(
            household_id=household_id,
            user_id=user_id,
            role=role,
            invited_at=invited_at
        )
        self.db.add(member)
        self.db.flush()
        return member

    def remove_member(self, household_id: int, user_id: int) -> bool:
        """
        Remove a member from a household.

        Returns:
            True if removed, False if not a member
        """
        stmt = delete(HouseholdMember).where(
            and_(
                HouseholdMember.household_id == household_id,
                HouseholdMember.user_id == user_id
            )
        )
        result = self.db.execute(stmt)
        self.db.flush()
        return result.rowcount > 0

    def get_members(self, household_id: int) -> List[dict]:
        """
        Get all members of a household with their roles, owner first.

        Returns:
            List of dicts with user info and role
        """
        stmt = (
            select(
                User.id,
                User.username,
                User.display_name,
                User.email,
                HouseholdMember.role,
                HouseholdMember.invited_at,
                HouseholdMember.joined_at
            )
            .join(HouseholdMember, User.id == HouseholdMember.user_id)
            .where(HouseholdMember.household_id == household_id)
            .order_by(
                case((HouseholdMember.role == HouseholdRole.OWNER, 0), else_=1),
                func.coalesce(User.display_name, User.username),
                User.id
            )
        )

        results = self.db.execute(stmt).all()
        return [
            {
                "user_id": r.id,
                "username": r.username,
                "display_name": r.display_name or r.username,
                "email": r.email,
                "role": r.role,
                "invited_at": r.invited_at,
                "joined_at": r.joined_at
            }
            for r in results
        ]

    def get_member_role(self, household_id: int, user_id: int) -> Optional[HouseholdRole]:
        """Get the role of a user in a household."""
        stmt = select(HouseholdMember.role).where(
            and_(
                HouseholdMember.household_id == household_id,
                HouseholdMember.user_id == user_id
            )
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def is_member(self, household_id: int, user_id: int) -> bool:
        """Check if a user is a member of a household."""
        return self.get_member_role(household_id, user_id) is not None

    def is_owner(self, household_id: int, user_id: int) -> bool:
        """Check if a user owns a household."""
        return self.get_member_role(household_id, user_id) == HouseholdRole.OWNER

    def is_user_in_household(self, user_id: int) -> bool:
        """Check if a user belongs to any household."""
        return self.get_user_household_id(user_id) is not None

    def get_member_count(self, household_id: int) -> int:
        """Get the number of members in a household."""
        stmt = select(func.count(HouseholdMember.id)).where(
            HouseholdMember.household_id == household_id
        )
        return self.db.execute(stmt).scalar_one()
