"""Request/response bodies for /api/register and /api/login."""

from typing import Optional

from pydantic import Field

from crittertrack.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """
    Email is normalized (trimmed, lower-cased) by the account service, and
    the password length rules live there too so their messages match the
    rest of the error taxonomy.
    """
    email: str = Field(max_length=255)
    password: str
    personal_name: Optional[str] = Field(default=None, max_length=1024)
    breeder_name: Optional[str] = Field(default=None, max_length=1024)
    is_breeder_profile: bool = False


class LoginRequest(CamelModel):
    email: str
    password: str


class AuthResponse(CamelModel):
    token: str = Field(description="HS256 bearer token, valid for the configured TTL")
    user_id: str
