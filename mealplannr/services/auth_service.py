from sqlalchemy.orm import Session
from datetime import timedelta
from mealplannr.models.user import User
from mealplannr.services.user_service import UserService
from mealplannr.schemas.user import UserCreate, Token
from mealplannr.utils.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
)
from mealplannr.config import settings
from mealplannr.core.exception import AuthenticationException, AuthorizationException


class AuthService:
    """Service layer for authentication operations."""

    def __init__(self, db: Session):
        self.db = db
        self.user_service = UserService(db)

    def register(self, user_data: UserCreate) -> User:
        return self.user_service.create_user(user_data)

    def login(self, username_or_email: str, password: str) -> Token:
        """
        Login user and return access token.
        """
        user = self.user_service.authenticate_user(username_or_email, password)

        if not user:
            raise AuthenticationException("Incorrect username or password")

        if not user.is_active:
            raise AuthorizationException(message="Account is deactivated")

        access_token = create_access_token(
            data={"sub": str(user.id), "username": user.username},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        refresh_token = create_refresh_token(data={"sub": str(user.id)})

        return Token(
            access_token=access_token, token_type="bearer", refresh_token=refresh_token
        )

    def refresh_access_token(self, refresh_token: str) -> Token:
        """
        Refresh access token using refresh token.
        Returns new access token.
        """
        payload = decode_access_token(refresh_token)

        if payload is None or payload.get("type") != "refresh":
            raise AuthenticationException("Could not validate refresh token")

        user = self.verify_token_payload(payload)

        access_token = create_access_token(
            data={"sub": str(user.id), "username": user.username},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )

        return Token(access_token=access_token, token_type="bearer")

    def verify_token(self, token: str) -> User:
        """Verify an access token and return its user."""
        payload = decode_access_token(token)
        if payload is None or payload.get("type") is not None:
            raise AuthenticationException("Could not validate credentials")

        return self.verify_token_payload(payload)

    def verify_token_payload(self, payload: dict) -> User:
        user_id_str = payload.get("sub")
        if user_id_str is None:
            raise AuthenticationException("Could not validate credentials")

        try:
            user_id = int(user_id_str)
        except (ValueError, TypeError):
            raise AuthenticationException("Invalid token format")

        user = self.user_service.get_user_by_id(user_id)
        if user is None:
            raise AuthenticationException("User not found")

        if not user.is_active:
            raise AuthenticationException("Account is deactivated")

        return user
