import pytest
from sqlalchemy.orm import Session
from mealplannr.services.auth_service import AuthService
from mealplannr.schemas.user import UserCreate
from mealplannr.core.exception import AuthenticationException, ConflictException
from mealplannr.utils.security import (
    create_invitation_token,
    decode_access_token,
    verify_invitation_token
)


@pytest.mark.unit
class TestAuthService:
    """Unit tests for AuthService."""

    def test_register_success(self, db_session: Session):
        auth_service = AuthService(db_session)
        user_data = UserCreate(
            username="newuser",
            email="newuser@example.com",
            password="password123",
            display_name="New User"
        )

        user = auth_service.register(user_data)

        assert user.username == "newuser"
        assert user.display_name == "New User"
        assert user.is_active is True
        assert user.is_admin is False
        assert user.hashed_password != "password123"

    def test_register_duplicate_username(self, db_session: Session, test_user):
        auth_service = AuthService(db_session)
        user_data = UserCreate(
            username="testuser",
            email="different@example.com",
            password="password123"
        )

        with pytest.raises(ConflictException):
            auth_service.register(user_data)

    def test_register_duplicate_email_case_insensitive(self, db_session: Session, test_user):
        auth_service = AuthService(db_session)
        user_data = UserCreate(
            username="someone",
            email="TESTUSER@example.com",
            password="password123"
        )

        with pytest.raises(ConflictException):
            auth_service.register(user_data)

    def test_login_success(self, db_session: Session, test_user):
        auth_service = AuthService(db_session)

        token = auth_service.login("testuser", "testpass123")

        assert token.token_type == "bearer"
        assert token.refresh_token is not None
        payload = decode_access_token(token.access_token)
        assert int(payload["sub"]) == test_user.id
        assert payload["username"] == test_user.username

    def test_login_with_email(self, db_session: Session, test_user):
        token = AuthService(db_session).login("testuser@example.com", "testpass123")

        assert token.access_token

    def test_login_invalid_password(self, db_session: Session, test_user):
        with pytest.raises(AuthenticationException) as exc_info:
            AuthService(db_session).login("testuser", "wrongpassword")

        assert "Incorrect username or password" in str(exc_info.value)

    def test_verify_token_rejects_refresh_token(self, db_session: Session, test_user):
        auth_service = AuthService(db_session)
        token = auth_service.login("testuser", "testpass123")

        assert auth_service.verify_token(token.access_token).id == test_user.id
        with pytest.raises(AuthenticationException):
            auth_service.verify_token(token.refresh_token)

    def test_refresh_access_token(self, db_session: Session, test_user):
        auth_service = AuthService(db_session)
        token = auth_service.login("testuser", "testpass123")

        refreshed = auth_service.refresh_access_token(token.refresh_token)

        assert int(decode_access_token(refreshed.access_token)["sub"]) == test_user.id
        with pytest.raises(AuthenticationException):
            auth_service.refresh_access_token(token.access_token)


@pytest.mark.unit
class TestInvitationTokens:

    def test_token_is_bound_to_invitation_and_action(self):
        token = create_invitation_token(5, "accept")

        assert verify_invitation_token(token, 5, "accept") is True
        assert verify_invitation_token(token, 5, "reject") is False
        assert verify_invitation_token(token, 6, "accept") is False
        assert verify_invitation_token("not-a-token", 5, "accept") is False

    def test_invitation_token_is_not_an_access_token(self, db_session: Session):
        with pytest.raises(AuthenticationException):
            AuthService(db_session).verify_token(create_invitation_token(1, "accept"))
