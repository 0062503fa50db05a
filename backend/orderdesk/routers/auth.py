"""
Staff login.
"""
from fastapi import APIRouter

from orderdesk.core.config import settings
from orderdesk.core.errors import AuthenticationError
from orderdesk.core.logging import get_logger
from orderdesk.core.security import authenticate_staff, create_access_token
from orderdesk.schemas import LoginRequest, TokenResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest) -> TokenResponse:
    """Exchange the staff email and password for a bearer token."""
    if not authenticate_staff(credentials.email, credentials.password):
        logger.warning("Staff login failed", email=credentials.email)
        raise AuthenticationError("Invalid email or password")

    token = create_access_token({"sub": settings.staff_email, "role": "staff"})
    logger.info("Staff login", email=settings.staff_email)
    return TokenResponse(
        access_token=token,
        expires_in=settings.jwt_expiration_hours * 3600,
    )
