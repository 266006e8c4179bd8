"""
CritterTrack Backend — Litter Service
=====================================

Ownership-scoped CRUD for litters. Same contract as AnimalService: the
Identity comes first, and absent or not-owned records are NotFoundError.
parent_ids are stored as given; they are not checked against animals.
"""

import logging
from typing import Any, Dict, List

from crittertrack.exceptions import NotFoundError
from crittertrack.services.auth_gate import Identity
from crittertrack.store import LITTER_FIELDS, CredentialStore, LitterRecord

logger = logging.getLogger(__name__)


def _writable(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k in LITTER_FIELDS}


class LitterService:
    def __init__(self, store: CredentialStore):
        self.store = store

    async def create(self, identity: Identity, fields: Dict[str, Any]) -> LitterRecord:
        litter = await self.store.create_litter(identity.user_id, _writable(fields))
        if litter is None:
            raise NotFoundError(resource="user")
        logger.info("User %s created litter %s", identity.user_id, litter.id)
        return litter

    async def list(self, identity: Identity) -> List[LitterRecord]:
        return await self.store.list_litters(identity.user_id)

    async def get(self, identity: Identity, litter_id: str) -> LitterRecord:
        litter = await self.store.get_litter(identity.user_id, litter_id)
        if litter is None:
            raise NotFoundError(resource="litter", resource_id=litter_id)
        return litter

    async def update(self, identity: Identity, litter_id: str, fields: Dict[str, Any]) -> None:
        matched = await self.store.update_litter(identity.user_id, litter_id, _writable(fields))
        if matched == 0:
            raise NotFoundError(resource="litter", resource_id=litter_id)

    async def delete(self, identity: Identity, litter_id: str) -> None:
        deleted = await self.store.delete_litter(identity.user_id, litter_id)
        if deleted == 0:
            raise NotFoundError(resource="litter", resource_id=litter_id)
        logger.info("User %s deleted litter %s", identity.user_id, litter_id)
