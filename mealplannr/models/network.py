from sqlalchemy import String, ForeignKey, DateTime, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
import enum
from mealplannr.models.base import Base, BaseModel, utc_now

if TYPE_CHECKING:
    from mealplannr.models.household import Household
    from mealplannr.models.user import User


class NetworkRole(str, enum.Enum):
    """Role of a household inside a network"""

    OWNER = "owner"
    MEMBER = "member"


class InvitationStatus(str, enum.Enum):
    """Lifecycle of a network invitation: pending -> accepted | rejected"""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Network(BaseModel):
    """
    A group of households linked for cross-household recipe sharing.
    The creating user's household owns the network.
    """

    __tablename__ = "networks"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    households: Mapped[List["NetworkHousehold"]] = relationship(
        "NetworkHousehold",
        back_populates="network",
        cascade="all, delete-orphan",
        lazy="select",
    )

    owner: Mapped["User"] = relationship(
        "User", foreign_keys=[created_by], lazy="selectin"
    )


class NetworkHousehold(Base):
    """
    Invitation/membership record linking a household to a network.
    Created as pending on invite; resolved exactly once by the invited household's owner.
    """

    __tablename__ = "network_households"
    __table_args__ = (
        UniqueConstraint("network_id", "household_id", name="unique_network_household"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    network_id: Mapped[int] = mapped_column(
        ForeignKey("networks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    household_id: Mapped[int] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[NetworkRole] = mapped_column(
        SQLEnum(NetworkRole), default=NetworkRole.MEMBER, nullable=False
    )
    status: Mapped[InvitationStatus] = mapped_column(
        SQLEnum(InvitationStatus), default=InvitationStatus.PENDING, nullable=False, index=True
    )
    invited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    joined_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    network: Mapped["Network"] = relationship(
        "Network", back_populates="households", lazy="selectin"
    )
    household: Mapped["Household"] = relationship(
        "Household", back_populates="network_links", lazy="selectin"
    )
