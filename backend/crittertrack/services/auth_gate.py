"""
CritterTrack Backend — Auth Gate
================================

What:  Turns a raw bearer token into an Identity, or rejects the request.
Who:   The `get_identity` FastAPI dependency calls `authenticate()` once per
       request; routes receive the resulting Identity and hand it to the
       services as their first argument.

Every rejection raises UnauthenticatedError with the same message, whether
the header was missing, the signature was wrong or the token had expired.
"""

from dataclasses import dataclass
from typing import Optional

from crittertrack.exceptions import UnauthenticatedError
from crittertrack.services.token_service import TokenService


@dataclass(frozen=True)
class Identity:
    """The authenticated caller. Built per request, never cached."""

    user_id: str


class AuthGate:
    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    def authenticate(self, raw_token: Optional[str]) -> Identity:
        if not raw_token:
            raise UnauthenticatedError()
        user_id = self.token_service.verify(raw_token)
        if user_id is None:
            raise UnauthenticatedError()
        return Identity(user_id=user_id)
