from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ...database import get_db
from ...schemas.user import UserCreate, UserResponse, Token
from ...schemas.result import Result
from ...services.auth_service import AuthService
from ...dependencies import get_current_user
from ...models.user import User

router = APIRouter()


@router.post(
    "/register",
    response_model=Result[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user.

    - **email**: Valid email address (unique)
    - **username**: Username (unique, 3-50 chars)
    - **password**: Password (min 8 chars)
    - **display_name**: Optional name shown to other users
    """
    auth_service = AuthService(db)
    user = auth_service.register(user_data)
    return Result.successful(data=user)


@router.post("/login", response_model=Result[Token])
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)
):
    """
    Login with username/email and password.

    Returns access token and refresh token wrapped in Result.
    """
    auth_service = AuthService(db)
    token = auth_service.login(form_data.username, form_data.password)
    return Result.successful(data=token)


@router.post("/refresh", response_model=Result[Token])
async def refresh_token(refresh_token: str, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new access token."""
    auth_service = AuthService(db)
    return Result.successful(data=auth_service.refresh_access_token(refresh_token))


@router.get("/me", response_model=Result[UserResponse])
async def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """Get current authenticated user's profile."""
    return Result.successful(data=current_user)
