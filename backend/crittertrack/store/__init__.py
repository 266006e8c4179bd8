"""
Credential store strategies.

`build_store()` picks one implementation from `Settings.store_backend`
at startup; everything above this package sees only CredentialStore.
"""

import logging

from crittertrack.config import Settings
from crittertrack.store.base import (
    ANIMAL_FIELDS,
    LITTER_FIELDS,
    USER_PROFILE_FIELDS,
    AnimalRecord,
    CredentialStore,
    LitterRecord,
    UserRecord,
)

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> CredentialStore:
    if settings.store_backend == "memory":
        from crittertrack.store.memory_store import InMemoryCredentialStore

        store: CredentialStore = InMemoryCredentialStore()
    elif settings.store_backend == "rest":
        from crittertrack.store.rest_store import RestCredentialStore

        store = RestCredentialStore(
            base_url=settings.rest_store_url,
            api_key=settings.rest_store_api_key,
            timeout=settings.rest_store_timeout,
        )
    else:
        from crittertrack.database import build_engine
        from crittertrack.store.sql_store import SqlCredentialStore

        store = SqlCredentialStore(build_engine(settings))

    logger.info("Credential store: %s", type(store).__name__)
    return store


__all__ = [
    "ANIMAL_FIELDS",
    "LITTER_FIELDS",
    "USER_PROFILE_FIELDS",
    "AnimalRecord",
    "CredentialStore",
    "LitterRecord",
    "UserRecord",
    "build_store",
]
