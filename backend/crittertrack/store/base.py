"""
CritterTrack Backend — Credential Store Interface
=================================================

What:  Abstract base class and record types for every persistence strategy.
Why:   Routes and services are written once against this contract; the
       concrete strategy (direct SQL, proxied REST data API, in-memory) is
       chosen once at startup by `build_store()`.
How:   Concrete stores inherit from CredentialStore and implement every
       abstract coroutine. Records are plain dataclasses so nothing above
       this layer depends on SQLAlchemy rows or JSON payloads.
Who:   Implemented by SqlCredentialStore, RestCredentialStore,
       InMemoryCredentialStore; called by the services layer.

Contract:
    - Domain outcomes are return values, never exceptions:
        missing / not owned  → None (get) or 0 (update, delete)
        email already taken  → None from create_user
    - Infrastructure faults raise StoreUnavailableError. No retries.
    - Every owner-scoped operation takes owner_id first and filters on it
      inside the store query itself.
    - Partial updates apply only the keys present in `fields`.
    - Lists are ordered by sequential_id.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

# Columns a client may set on create / update. Anything else is ignored by
# the services before it reaches a store.
USER_PROFILE_FIELDS = (
    "personal_name",
    "breeder_name",
    "profile_picture_url",
    "is_breeder_profile",
)

ANIMAL_FIELDS = (
    "name",
    "species",
    "breeder",
    "birth_date",
    "gender",
    "color_variety",
    "coat_variety",
    "registry_code",
    "owner",
    "remarks",
    "father_id",
    "mother_id",
    "show_on_profile",
    "show_registry_code",
    "show_owner",
    "show_remarks",
    "show_parents",
    "genetics_code",
)

LITTER_FIELDS = ("name", "birth_date", "count", "parent_ids")


@dataclass
class UserRecord:
    id: str
    email: str
    password_hash: str
    personal_name: Optional[str] = None
    breeder_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    is_breeder_profile: bool = False
    sequential_id: int = 0


@dataclass
class AnimalRecord:
    id: str
    user_id: str
    species: str
    name: Optional[str] = None
    breeder: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    color_variety: Optional[str] = None
    coat_variety: Optional[str] = None
    registry_code: Optional[str] = None
    owner: Optional[str] = None
    remarks: Optional[str] = None
    father_id: Optional[str] = None
    mother_id: Optional[str] = None
    show_on_profile: bool = False
    show_registry_code: bool = False
    show_owner: bool = False
    show_remarks: bool = False
    show_parents: bool = False
    genetics_code: Optional[str] = None
    sequential_id: int = 0


@dataclass
class LitterRecord:
    id: str
    user_id: str
    name: str
    birth_date: date
    count: int = 0
    parent_ids: List[str] = field(default_factory=list)
    sequential_id: int = 0


class CredentialStore(ABC):
    """
    Durable persistence of users, animals and litters.

    Uniqueness (email) and ownership (user_id) are enforced here, at the
    storage layer, not by callers.
    """

    # ── Users ─────────────────────────────────────────────────────────────

    @abstractmethod
    async def create_user(
        self,
        email: str,
        password_hash: str,
        personal_name: Optional[str] = None,
        breeder_name: Optional[str] = None,
        is_breeder_profile: bool = False,
    ) -> Optional[UserRecord]:
        """
        Insert a new user.

        The existence check and the insert form one atomic unit: of two
        concurrent calls with the same email exactly one returns a record.

        Returns:
            The created UserRecord, or None when the email is already registered.
        """
        ...

    @abstractmethod
    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def update_user_profile(
        self, user_id: str, fields: Dict[str, Any]
    ) -> Optional[UserRecord]:
        """Apply `fields` to the user; None when the user does not exist."""
        ...

    @abstractmethod
    async def search_users(self, term: str) -> List[UserRecord]:
        """
        Case-insensitive substring match on personal_name OR breeder_name.

        NULL names behave as empty strings, so a user with only a breeder
        name is still found by that name.
        """
        ...

    # ── Animals ───────────────────────────────────────────────────────────

    @abstractmethod
    async def create_animal(
        self, owner_id: str, fields: Dict[str, Any]
    ) -> Optional[AnimalRecord]:
        """Insert an animal for `owner_id`; None only if that user no longer exists."""
        ...

    @abstractmethod
    async def list_animals(
        self, owner_id: str, species: Optional[str] = None
    ) -> List[AnimalRecord]:
        """Animals owned by `owner_id`, optionally filtered by species substring (case-insensitive)."""
        ...

    @abstractmethod
    async def get_animal(self, owner_id: str, animal_id: str) -> Optional[AnimalRecord]:
        ...

    @abstractmethod
    async def update_animal(
        self, owner_id: str, animal_id: str, fields: Dict[str, Any]
    ) -> int:
        """
        Partial, owner-scoped update.

        Returns:
            Number of rows matched (0 or 1). Absent and not-owned are both 0.
            With an empty `fields` the record is left untouched and the
            match count is still reported.
        """
        ...

    @abstractmethod
    async def delete_animal(self, owner_id: str, animal_id: str) -> int:
        ...

    @abstractmethod
    async def list_public_animals(self, owner_id: str) -> List[AnimalRecord]:
        """Animals of `owner_id` with show_on_profile set. No authentication involved."""
        ...

    # ── Litters ───────────────────────────────────────────────────────────

    @abstractmethod
    async def create_litter(
        self, owner_id: str, fields: Dict[str, Any]
    ) -> Optional[LitterRecord]:
        ...

    @abstractmethod
    async def list_litters(self, owner_id: str) -> List[LitterRecord]:
        ...

    @abstractmethod
    async def get_litter(self, owner_id: str, litter_id: str) -> Optional[LitterRecord]:
        ...

    @abstractmethod
    async def update_litter(
        self, owner_id: str, litter_id: str, fields: Dict[str, Any]
    ) -> int:
        ...

    @abstractmethod
    async def delete_litter(self, owner_id: str, litter_id: str) -> int:
        ...

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def create_schema(self) -> None:
        """Create tables if the backend supports it (no-op by default)."""

    @abstractmethod
    async def ping(self) -> bool:
        """Lightweight reachability check used by GET /health."""
        ...

    async def close(self) -> None:
        """Release pooled connections (no-op by default)."""
