"""
CritterTrack Backend — Animal Service
=====================================

What:  Ownership-scoped CRUD for animals plus the public profile views.
How:   Every owner operation takes the caller's Identity first and passes
       identity.user_id to the store as the scope. A record that exists but
       belongs to someone else comes back from the store exactly like a
       missing one, and both become NotFoundError here.
Who:   Called by routes/animals.py and routes/public.py.

Public views:
    Only animals with show_on_profile are visible. Within a visible animal,
    fields are hidden unless their flag is set:
        registry_code         show_registry_code
        owner                 show_owner
        remarks               show_remarks
        father_id, mother_id  show_parents
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from crittertrack.exceptions import NotFoundError
from crittertrack.services.auth_gate import Identity
from crittertrack.store import ANIMAL_FIELDS, AnimalRecord, CredentialStore

logger = logging.getLogger(__name__)


def _writable(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k in ANIMAL_FIELDS}


def redact(animal: AnimalRecord) -> AnimalRecord:
    """Copy of `animal` with every field its visibility flags hide set to None."""
    hidden: Dict[str, Any] = {}
    if not animal.show_registry_code:
        hidden["registry_code"] = None
    if not animal.show_owner:
        hidden["owner"] = None
    if not animal.show_remarks:
        hidden["remarks"] = None
    if not animal.show_parents:
        hidden["father_id"] = None
        hidden["mother_id"] = None
    return replace(animal, **hidden)


class AnimalService:
    def __init__(self, store: CredentialStore):
        self.store = store

    async def create(self, identity: Identity, fields: Dict[str, Any]) -> AnimalRecord:
        animal = await self.store.create_animal(identity.user_id, _writable(fields))
        if animal is None:
            # The token outlived its user
            raise NotFoundError(resource="user")
        logger.info("User %s created animal %s", identity.user_id, animal.id)
        return animal

    async def list(self, identity: Identity, species: Optional[str] = None) -> List[AnimalRecord]:
        term = species.strip() if species else None
        return await self.store.list_animals(identity.user_id, term or None)

    async def get(self, identity: Identity, animal_id: str) -> AnimalRecord:
        animal = await self.store.get_animal(identity.user_id, animal_id)
        if animal is None:
            raise NotFoundError(resource="animal", resource_id=animal_id)
        return animal

    async def update(self, identity: Identity, animal_id: str, fields: Dict[str, Any]) -> None:
        """Apply only the fields present; absent fields keep their stored value."""
        matched = await self.store.update_animal(identity.user_id, animal_id, _writable(fields))
        if matched == 0:
            raise NotFoundError(resource="animal", resource_id=animal_id)

    async def delete(self, identity: Identity, animal_id: str) -> None:
        deleted = await self.store.delete_animal(identity.user_id, animal_id)
        if deleted == 0:
            raise NotFoundError(resource="animal", resource_id=animal_id)
        logger.info("User %s deleted animal %s", identity.user_id, animal_id)

    # ── Public profile (no authentication) ────────────────────────────────

    async def list_public(self, owner_id: str) -> List[AnimalRecord]:
        return await self.store.list_public_animals(owner_id)

    async def get_public(self, owner_id: str, animal_id: str) -> AnimalRecord:
        animal = await self.store.get_animal(owner_id, animal_id)
        if animal is None or not animal.show_on_profile:
            raise NotFoundError(resource="animal", resource_id=animal_id)
        return redact(animal)
