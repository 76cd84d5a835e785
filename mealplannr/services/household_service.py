import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from mealplannr.database import unit_of_work
from mealplannr.models.household import Household, HouseholdRole
from mealplannr.models.base import utc_now
from mealplannr.repositories.household_repository import HouseholdRepository
from mealplannr.repositories.user_repository import UserRepository
from mealplannr.core.exception import (
    ResourceNotFoundException,
    ConflictException,
    ValidationException,
    AuthorizationException
)
from mealplannr.config import settings

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = (HouseholdRole.MEMBER, HouseholdRole.MANAGER, HouseholdRole.CHILD)


class HouseholdService:
    """Service layer for household operations."""

    def __init__(self, db: Session):
        self.db = db
        self.household_repo = HouseholdRepository(db)
        self.user_repo = UserRepository(db)

    def create_household(self, user_id: int, name: str) -> Household:
        """
        Create a new household with the user as its owner.

        Args:
            user_id: ID of user creating the household
            name: Household name

        Returns:
            Created household

        Raises:
            ConflictException: If the user already belongs to a household
        """
        if self.household_repo.is_user_in_household(user_id):
            raise ConflictException(
                "You already belong to a household.", code="AlreadyInHousehold"
            )

        name = name.strip()
        if not name:
            raise ValidationException("Household name is required.", field="name")

        with unit_of_work(self.db, "create household"):
            household = self.household_repo.add(
                Household(
                    name=name,
                    created_by=user_id,
                    max_members=settings.HOUSEHOLD_MAX_MEMBERS
                )
            )
            self.household_repo.add_member(household.id, user_id, role=HouseholdRole.OWNER)

        self.db.refresh(household)
        logger.info("Household %s created by user %s", household.id, user_id)
        return household

    def get_user_household(self, user_id: int) -> Optional[Household]:
        """Get the household the user belongs to, if any."""
        return self.household_repo.get_user_household(user_id)

    def get_owned_household(self, user_id: int) -> Optional[Household]:
        """Get the household the user owns, if any."""
        return self.household_repo.get_owned_household(user_id)

    def get_household(self, household_id: int) -> Household:
        household = self.household_repo.get(household_id)
        if not household:
            raise ResourceNotFoundException("Household", household_id)
        return household

    def get_members(self, household_id: int, user_id: int) -> List[dict]:
        """
        Get the members of a household, owner first.

        Raises:
            ResourceNotFoundException: If household not found
            AuthorizationException: If user is not a member
        """
        self.get_household(household_id)

        if not self.household_repo.is_member(household_id, user_id):
            raise AuthorizationException("You are not a member of this household")

        return self.household_repo.get_members(household_id)

    def add_member(
        self,
        household_id: int,
        owner_id: int,
        email: str,
        role: HouseholdRole = HouseholdRole.MEMBER
    ) -> dict:
        """
        Add an existing user to a household by email.

        Raises:
            ResourceNotFoundException: If the household or the user does not exist
            AuthorizationException: If the caller does not own the household
            ValidationException: If the role cannot be assigned
            ConflictException: If the user already has a household or the household is full
        """
        household = self.get_household(household_id)

        if not self.household_repo.is_owner(household_id, owner_id):
            raise AuthorizationException(
                "Only the household owner can add members", code="NotOwner"
            )

        if role not in ASSIGNABLE_ROLES:
            raise ValidationException(
                "Role must be one of: member, manager, child.", field="role", code="InvalidRole"
            )

        user = self.user_repo.get_by_email(email)
        if not user:
            raise ResourceNotFoundException("User", email)

        if self.household_repo.is_user_in_household(user.id):
            raise ConflictException(
                "User already belongs to a household.", code="AlreadyInHousehold"
            )

        if self.household_repo.get_member_count(household_id) >= household.max_members:
            raise ConflictException(
                f"Household is full ({household.max_members} members).", code="HouseholdFull"
            )

        with unit_of_work(self.db, "add household member"):
            self.household_repo.add_member(
                household_id, user.id, role=role, invited_at=utc_now()
            )

        logger.info("User %s added to household %s as %s", user.id, household_id, role.value)
        return next(m for m in self.household_repo.get_members(household_id) if m["user_id"] == user.id)

    def remove_member(self, household_id: int, owner_id: int, member_id: int) -> bool:
        """
        Remove a member from a household (owner only).

        Raises:
            AuthorizationException: If the caller does not own the household
            ValidationException: If the owner tries to remove themselves
            ResourceNotFoundException: If the user is not a member
        """
        self.get_household(household_id)

        if not self.household_repo.is_owner(household_id, owner_id):
            raise AuthorizationException(
                "Only the household owner can remove members", code="NotOwner"
            )

        if member_id == owner_id:
            raise ValidationException(
                "The owner cannot be removed from their household.", code="CannotRemoveOwner"
            )

        with unit_of_work(self.db, "remove household member"):
            removed = self.household_repo.remove_member(household_id, member_id)
            if not removed:
                raise ResourceNotFoundException("Household member", member_id)

        logger.info("User %s removed from household %s", member_id, household_id)
        return True
