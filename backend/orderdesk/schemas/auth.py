"""
Staff login schemas.
"""
from pydantic import Field

from orderdesk.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
