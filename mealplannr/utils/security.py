from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from jwt.exceptions import PyJWTError
from passlib.context import CryptContext
from mealplannr.config import settings

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

INVITATION_TOKEN_TYPE = "invitation"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary to encode in the token
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode a JWT token.

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except PyJWTError:
        return None


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a refresh token (default expiry 30 days)."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=30))
    to_encode.update({"exp": expire, "type": "refresh"})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_invitation_token(
    invitation_id: int, action: str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create the signed token carried by an emailed accept/reject link.

    The token is bound to one invitation and one action.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.INVITATION_TOKEN_EXPIRE_HOURS)
    )
    to_encode = {
        "sub": str(invitation_id),
        "action": action,
        "type": INVITATION_TOKEN_TYPE,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_invitation_token(token: str, invitation_id: int, action: str) -> bool:
    """Check that a link token is valid, unexpired and issued for this invitation and action."""
    payload = decode_access_token(token)
    if payload is None or payload.get("type") != INVITATION_TOKEN_TYPE:
        return False

    return payload.get("sub") == str(invitation_id) and payload.get("action") == action
