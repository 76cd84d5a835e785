from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Optional
from mealplannr.models.user import User
from mealplannr.repositories.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username."""
        return self.db.query(User).filter(User.username == username).first()

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)."""
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def get_by_username_or_email(self, identifier: str) -> Optional[User]:
        """Get user by username or email (for login)."""
        return (
            self.db.query(User)
            .filter((User.username == identifier) | (func.lower(User.email) == identifier.lower()))
            .first()
        )

    def username_exists(self, username: str) -> bool:
        """Check if username already exists."""
        return self.db.query(User).filter(User.username == username).count() > 0

    def email_exists(self, email: str) -> bool:
        """Check if email already exists."""
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).count() > 0
