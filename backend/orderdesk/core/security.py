"""
Security utilities: staff password check and JWT session tokens.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from orderdesk.core.config import settings
from orderdesk.core.logging import get_logger

logger = get_logger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """
    Hash a password with the scheme ``verify_password`` accepts.

    Use it to produce the ``STAFF_PASSWORD_HASH`` setting for the staff account.
    """
    return pwd_context.hash(password)


def authenticate_staff(email: str, password: str) -> bool:
    """Check login credentials against the configured staff account."""
    if not settings.staff_password_hash:
        logger.warning("Staff password hash not configured, login disabled")
        return False
    if email.strip().lower() != settings.staff_email.lower():
        return False
    return verify_password(password, settings.staff_password_hash)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.jwt_expiration_hours)
    )
    to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc)})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT access token."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError as e:
        logger.warning("Invalid JWT token", error=str(e))
        return None
