from sqlalchemy.orm import Session
from typing import Optional
from mealplannr.models.user import User
from mealplannr.database import unit_of_work
from mealplannr.repositories.user_repository import UserRepository
from mealplannr.schemas.user import UserCreate
from mealplannr.utils.security import get_password_hash, verify_password
from mealplannr.core.exception import ConflictException


class UserService:
    """Service layer for user operations."""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.user_repo.get(user_id)

    def create_user(self, user_data: UserCreate, is_admin: bool = False) -> User:
        """
        Create a new user.

        Validates that username and email are unique.
        Hashes the password before storing.
        """
        if self.user_repo.username_exists(user_data.username):
            raise ConflictException(
                f"Username '{user_data.username}' is already taken.", code="AlreadyExists"
            )

        if self.user_repo.email_exists(user_data.email):
            raise ConflictException(
                f"Email '{user_data.email}' is already registered.", code="AlreadyExists"
            )

        user = User(
            email=user_data.email,
            username=user_data.username,
            hashed_password=get_password_hash(user_data.password),
            display_name=user_data.display_name,
            is_active=True,
            is_admin=is_admin,
        )

        with unit_of_work(self.db, "create user"):
            self.user_repo.add(user)

        self.db.refresh(user)
        return user

    def authenticate_user(self, username_or_email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by username/email and password.
        Returns User if credentials are valid, None otherwise.
        """
        user = self.user_repo.get_by_username_or_email(username_or_email)

        if not user:
            return None

        if not verify_password(password, user.hashed_password):
            return None

        return user
