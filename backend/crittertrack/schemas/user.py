"""User representations: the owner's own view, the public view, profile edits."""

from typing import Optional

from pydantic import Field

from crittertrack.schemas.common import CamelModel


class PublicUserResponse(CamelModel):
    """What anyone may see about a user. Never includes the email address."""
    id: str
    personal_name: Optional[str] = None
    breeder_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    is_breeder_profile: bool = False
    sequential_id: int


class UserResponse(PublicUserResponse):
    """The authenticated user's own record (GET /api/user, POST /api/profile)."""
    email: str


class UpdateProfileRequest(CamelModel):
    """
    Partial update: omitted fields, and fields sent as null, are left as
    they are. A field cannot be cleared through this endpoint.
    """
    personal_name: Optional[str] = Field(default=None, max_length=1024)
    breeder_name: Optional[str] = Field(default=None, max_length=1024)
    profile_picture_url: Optional[str] = Field(default=None, max_length=2048)
    is_breeder_profile: Optional[bool] = None
