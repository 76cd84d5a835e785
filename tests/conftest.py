import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Set required environment variables for testing
os.environ["SECRET_KEY"] = "test-secret-key-for-testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.pop("SMTP_HOST", None)

from mealplannr.main import app
from mealplannr.config import settings
from mealplannr.database import get_db
from mealplannr.models.base import Base
from mealplannr.models.user import User
from mealplannr.models.household import Household, HouseholdMember, HouseholdRole
from mealplannr.models.recipe import Recipe, RecipeStatus
from mealplannr.utils.security import get_password_hash, create_access_token

TEST_DATABASE_URL = "sqlite:///:memory:"
API = settings.API_V1_STR


class RecordingMailer:
    """Mailer that keeps sent messages in memory."""

    def __init__(self):
        self.sent = []

    def send(self, to_email: str, subject: str, body: str) -> None:
        self.sent.append({"to": to_email, "subject": subject, "body": body})


@pytest.fixture
def engine():
    """A fresh in-memory database per test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create a new database session for each test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    yield session

    session.close()
    app.dependency_overrides.clear()


@pytest.fixture
def client(db_session):
    """Create a FastAPI TestClient with database session override."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def make_user(db_session):
    """Factory for users; the password is always 'testpass123'."""
    def _make_user(username: str, is_admin: bool = False, display_name: str = None) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=get_password_hash("testpass123"),
            display_name=display_name,
            is_active=True,
            is_admin=is_admin
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_household(db_session):
    """Factory for a household owned by the given user."""
    def _make_household(owner: User, name: str = None) -> Household:
        household = Household(name=name or f"{owner.username}'s household", created_by=owner.id)
        db_session.add(household)
        db_session.flush()
        db_session.add(
            HouseholdMember(household_id=household.id, user_id=owner.id, role=HouseholdRole.OWNER)
        )
        db_session.commit()
        db_session.refresh(household)
        return household

    return _make_household


@pytest.fixture
def add_member(db_session):
    """Put a user into an existing household."""
    def _add_member(household: Household, user: User, role: HouseholdRole = HouseholdRole.MEMBER):
        member = HouseholdMember(household_id=household.id, user_id=user.id, role=role)
        db_session.add(member)
        db_session.commit()
        return member

    return _add_member


@pytest.fixture
def make_recipe(db_session):
    """Factory for recipes written by the given user."""
    def _make_recipe(author: User, title: str = "Pancakes", status: RecipeStatus = RecipeStatus.PUBLISH) -> Recipe:
        recipe = Recipe(title=title, content="Mix and fry.", status=status, author_id=author.id)
        db_session.add(recipe)
        db_session.commit()
        db_session.refresh(recipe)
        return recipe

    return _make_recipe


@pytest.fixture
def test_user(make_user):
    return make_user("testuser")


@pytest.fixture
def auth_headers_for():
    """Build bearer headers for any user."""
    def _headers(user: User) -> dict:
        token = create_access_token(data={"sub": str(user.id), "username": user.username})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def auth_token(client, test_user):
    """Get authentication token for test user."""
    response = client.post(
        f"{API}/auth/login",
        data={"username": "testuser", "password": "testpass123"}
    )
    return response.json()["data"]["access_token"]


@pytest.fixture
def auth_headers(auth_token):
    """Get authorization headers with bearer token."""
    return {"Authorization": f"Bearer {auth_token}"}
