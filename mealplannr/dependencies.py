from fastapi import BackgroundTasks, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .database import get_db
from .config import settings
from .models.user import User
from .services.auth_service import AuthService
from .services.email_service import BackgroundMailer

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get current authenticated user.
    Raises AuthenticationException for missing, invalid or expired tokens.

    Example:
        @router.get("/protected")
        async def protected_route(current_user: User = Depends(get_current_user)):
            return {"user_id": current_user.id}
    """
    return AuthService(db).verify_token(token)


def get_mailer(background_tasks: BackgroundTasks) -> BackgroundMailer:
    """Mailer that sends after the response has been written."""
    return BackgroundMailer(background_tasks)
