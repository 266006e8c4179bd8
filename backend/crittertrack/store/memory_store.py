"""
CritterTrack Backend — In-Memory Credential Store
=================================================

What:  Process-local CredentialStore used for development and tests.
How:   Plain dicts keyed by record id. A single asyncio.Lock guards every
       mutation, so registration's check+insert is atomic within the
       process. Reads copy records out so callers never hold live state.

Nothing here survives a restart. Do not use with more than one worker.
"""

import asyncio
import logging
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional

from crittertrack.store.base import (
    AnimalRecord,
    CredentialStore,
    LitterRecord,
    UserRecord,
)

logger = logging.getLogger(__name__)


def _contains(value: Optional[str], needle: str) -> bool:
    return needle in (value or "").lower()


class InMemoryCredentialStore(CredentialStore):
    def __init__(self):
        self._lock = asyncio.Lock()
        self._sequence = 0
        self._users: Dict[str, UserRecord] = {}
        self._animals: Dict[str, AnimalRecord] = {}
        self._litters: Dict[str, LitterRecord] = {}

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    # ── Users ─────────────────────────────────────────────────────────────

    async def create_user(
        self,
        email: str,
        password_hash: str,
        personal_name: Optional[str] = None,
        breeder_name: Optional[str] = None,
        is_breeder_profile: bool = False,
    ) -> Optional[UserRecord]:
        async with self._lock:
            if any(u.email == email for u in self._users.values()):
                return None
            user = UserRecord(
                id=str(uuid.uuid4()),
                email=email,
                password_hash=password_hash,
                personal_name=personal_name,
                breeder_name=breeder_name,
                is_breeder_profile=is_breeder_profile,
                sequential_id=self._next_sequence(),
            )
            self._users[user.id] = user
            logger.debug("Created user %s", user.id)
            return replace(user)

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.email == email:
                return replace(user)
        return None

    async def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        user = self._users.get(user_id)
        return replace(user) if user else None

    async def update_user_profile(
        self, user_id: str, fields: Dict[str, Any]
    ) -> Optional[UserRecord]:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = replace(user, **fields)
            self._users[user_id] = updated
            return replace(updated)

    async def search_users(self, term: str) -> List[UserRecord]:
        needle = term.lower()
        matches = [
            replace(u)
            for u in self._users.values()
            if _contains(u.personal_name, needle) or _contains(u.breeder_name, needle)
        ]
        return sorted(matches, key=lambda u: u.sequential_id)

    # ── Animals ───────────────────────────────────────────────────────────

    async def create_animal(
        self, owner_id: str, fields: Dict[str, Any]
    ) -> Optional[AnimalRecord]:
        async with self._lock:
            if owner_id not in self._users:
                return None
            animal = AnimalRecord(
                id=str(uuid.uuid4()),
                user_id=owner_id,
                sequential_id=self._next_sequence(),
                **fields,
            )
            self._animals[animal.id] = animal
            return replace(animal)

    async def list_animals(
        self, owner_id: str, species: Optional[str] = None
    ) -> List[AnimalRecord]:
        needle = species.lower() if species else None
        matches = [
            replace(a)
            for a in self._animals.values()
            if a.user_id == owner_id and (needle is None or _contains(a.species, needle))
        ]
        return sorted(matches, key=lambda a: a.sequential_id)

    async def get_animal(self, owner_id: str, animal_id: str) -> Optional[AnimalRecord]:
        animal = self._animals.get(animal_id)
        if animal is None or animal.user_id != owner_id:
            return None
        return replace(animal)

    async def update_animal(
        self, owner_id: str, animal_id: str, fields: Dict[str, Any]
    ) -> int:
        async with self._lock:
            animal = self._animals.get(animal_id)
            if animal is None or animal.user_id != owner_id:
                return 0
            self._animals[animal_id] = replace(animal, **fields)
            return 1

    async def delete_animal(self, owner_id: str, animal_id: str) -> int:
        async with self._lock:
            animal = self._animals.get(animal_id)
            if animal is None or animal.user_id != owner_id:
                return 0
            del self._animals[animal_id]
            return 1

    async def list_public_animals(self, owner_id: str) -> List[AnimalRecord]:
        matches = [
            replace(a)
            for a in self._animals.values()
            if a.user_id == owner_id and a.show_on_profile
        ]
        return sorted(matches, key=lambda a: a.sequential_id)

    # ── Litters ───────────────────────────────────────────────────────────

    async def create_litter(
        self, owner_id: str, fields: Dict[str, Any]
    ) -> Optional[LitterRecord]:
        async with self._lock:
            if owner_id not in self._users:
                return None
            litter = LitterRecord(
                id=str(uuid.uuid4()),
                user_id=owner_id,
                sequential_id=self._next_sequence(),
                **fields,
            )
            self._litters[litter.id] = litter
            return replace(litter, parent_ids=list(litter.parent_ids))

    async def list_litters(self, owner_id: str) -> List[LitterRecord]:
        matches = [
            replace(item, parent_ids=list(item.parent_ids))
            for item in self._litters.values()
            if item.user_id == owner_id
        ]
        return sorted(matches, key=lambda item: item.sequential_id)

    async def get_litter(self, owner_id: str, litter_id: str) -> Optional[LitterRecord]:
        litter = self._litters.get(litter_id)
        if litter is None or litter.user_id != owner_id:
            return None
        return replace(litter, parent_ids=list(litter.parent_ids))

    async def update_litter(
        self, owner_id: str, litter_id: str, fields: Dict[str, Any]
    ) -> int:
        async with self._lock:
            litter = self._litters.get(litter_id)
            if litter is None or litter.user_id != owner_id:
                return 0
            self._litters[litter_id] = replace(litter, **fields)
            return 1

    async def delete_litter(self, owner_id: str, litter_id: str) -> int:
        async with self._lock:
            litter = self._litters.get(litter_id)
            if litter is None or litter.user_id != owner_id:
                return 0
            del self._litters[litter_id]
            return 1

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def ping(self) -> bool:
        return True
