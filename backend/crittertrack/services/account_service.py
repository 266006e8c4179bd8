"""
CritterTrack Backend — Account Service
======================================

What:  Registration, login, current-user lookup, profile updates and the
       public user directory.
How:   Orchestrates the credential store, the password hasher and the token
       service. Store outcomes (None) are turned into the error taxonomy here.
Who:   Called by routes/auth.py, routes/users.py and routes/public.py.

Email policy:
    Addresses are trimmed and lower-cased before they are stored or looked
    up, so "Ann@Example.com" and "ann@example.com" are the same account.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from crittertrack.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from crittertrack.services.auth_gate import Identity
from crittertrack.services.password_hasher import MAX_PASSWORD_BYTES, PasswordHasher
from crittertrack.services.token_service import TokenService
from crittertrack.store import USER_PROFILE_FIELDS, CredentialStore, UserRecord

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True)
class AuthResult:
    token: str
    user_id: str


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AccountService:
    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        password_min_length: int = 12,
    ):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.password_min_length = password_min_length
        # Hash of a throwaway password, checked when the email is unknown so
        # both login failures pay for one bcrypt verification
        self._dummy_hash: Optional[str] = None

    def _validate_password(self, password: str) -> None:
        if len(password) < self.password_min_length:
            raise ValidationError(
                message=f"Password must be at least {self.password_min_length} characters long.",
                field="password",
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.",
                field="password",
            )

    async def register(
        self,
        email: str,
        password: str,
        personal_name: Optional[str] = None,
        breeder_name: Optional[str] = None,
        is_breeder_profile: bool = False,
    ) -> AuthResult:
        """
        Create an account and return a token for it.

        Raises:
            ValidationError: blank email, password too short or too long
            ConflictError:   email already registered (including a lost race)
        """
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationError(message="Email is required.", field="email")
        self._validate_password(password or "")

        password_hash = await self.hasher.hash(password)
        user = await self.store.create_user(
            email=normalized,
            password_hash=password_hash,
            personal_name=personal_name,
            breeder_name=breeder_name,
            is_breeder_profile=is_breeder_profile,
        )
        if user is None:
            raise ConflictError(
                message="An account with this email already exists.",
                context={"field": "email"},
            )

        logger.info("Registered user %s", user.id)
        return AuthResult(token=self.tokens.issue(user.id), user_id=user.id)

    async def login(self, email: str, password: str) -> AuthResult:
        """Unknown email and wrong password produce the same error."""
        user = await self.store.find_user_by_email(normalize_email(email))
        if user is None:
            if self._dummy_hash is None:
                self._dummy_hash = await self.hasher.hash("crittertrack-unknown-account")
            await self.hasher.verify(password or "", self._dummy_hash)
            logger.info("Login failed")
            raise UnauthenticatedError(message=INVALID_CREDENTIALS)
        if not await self.hasher.verify(password or "", user.password_hash):
            logger.info("Login failed")
            raise UnauthenticatedError(message=INVALID_CREDENTIALS)

        return AuthResult(token=self.tokens.issue(user.id), user_id=user.id)

    async def get_current_user(self, identity: Identity) -> UserRecord:
        user = await self.store.find_user_by_id(identity.user_id)
        if user is None:
            raise NotFoundError(resource="user")
        return user

    async def update_profile(self, identity: Identity, fields: Dict[str, Any]) -> UserRecord:
        changes = {k: v for k, v in fields.items() if k in USER_PROFILE_FIELDS}
        user = await self.store.update_user_profile(identity.user_id, changes)
        if user is None:
            raise NotFoundError(resource="user")
        logger.info("Updated profile of user %s (%s)", user.id, ", ".join(sorted(changes)) or "no fields")
        return user

    async def get_public_user(self, user_id: str) -> UserRecord:
        user = await self.store.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def search_users(self, term: Optional[str]) -> List[UserRecord]:
        needle = (term or "").strip()
        if not needle:
            raise ValidationError(message="Search term is required.", field="q")
        return await self.store.search_users(needle)
