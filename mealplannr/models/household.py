from sqlalchemy import String, ForeignKey, Integer, DateTime, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
import enum
from mealplannr.config import settings
from mealplannr.models.base import Base, BaseModel, utc_now

if TYPE_CHECKING:
    from mealplannr.models.user import User
    from mealplannr.models.network import NetworkHousehold


class HouseholdRole(str, enum.Enum):
    """Roles a user can hold inside a household"""

    OWNER = "owner"
    MEMBER = "member"
    MANAGER = "manager"
    CHILD = "child"


class Household(BaseModel):
    """
    A group of users sharing one membership record set.
    Each household has exactly one owner and a capped number of members.
    """

    __tablename__ = "households"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Creator/owner
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    max_members: Mapped[int] = mapped_column(
        Integer, default=lambda: settings.HOUSEHOLD_MAX_MEMBERS, nullable=False
    )

    # Relationships
    members: Mapped[List["HouseholdMember"]] = relationship(
        "HouseholdMember",
        back_populates="household",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    network_links: Mapped[List["NetworkHousehold"]] = relationship(
        "NetworkHousehold",
        back_populates="household",
        cascade="all, delete-orphan",
        lazy="select",
    )

    owner: Mapped["User"] = relationship(
        "User", foreign_keys=[created_by], lazy="selectin"
    )


class HouseholdMember(Base):
    """Membership of a user in a household, with their household role."""

    __tablename__ = "household_members"
    __table_args__ = (
        UniqueConstraint("household_id", "user_id", name="unique_household_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    household_id: Mapped[int] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[HouseholdRole] = mapped_column(
        SQLEnum(HouseholdRole), default=HouseholdRole.MEMBER, nullable=False
    )
    invited_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    household: Mapped["Household"] = relationship(
        "Household", back_populates="members", lazy="selectin"
    )
    user: Mapped["User"] = relationship(
        "User", back_populates="memberships", lazy="selectin"
    )
