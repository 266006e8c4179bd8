"""
CritterTrack Backend — SQL Store Tests
======================================

Behaviour specific to SqlCredentialStore that the shared contract tests
cannot cover: concurrent registration against a real database file and
driver failures surfacing as StoreUnavailableError. PostgreSQL engines
are built at the server's default isolation level.
"""

import asyncio
from unittest.mock import patch

import pytest

from crittertrack.config import Settings
from crittertrack.database import build_engine
from crittertrack.exceptions import StoreUnavailableError
from crittertrack.store.sql_store import SqlCredentialStore


@pytest.mark.asyncio
async def test_concurrent_registration_yields_one_user(sql_store):
    results = await asyncio.gather(
        *(sql_store.create_user("race@example.com", f"hash-{i}") for i in range(5))
    )

    created = [r for r in results if r is not None]
    assert len(created) == 1
    assert results.count(None) == 4

    stored = await sql_store.find_user_by_email("race@example.com")
    assert stored.id == created[0].id


@pytest.mark.asyncio
async def test_deleting_user_cascades_to_animals(sql_store):
    from sqlalchemy import delete

    from crittertrack.models import User

    user = await sql_store.create_user("ann@example.com", "h")
    animal = await sql_store.create_animal(user.id, {"species": "Mouse"})

    async with sql_store._transaction("test_cleanup") as session:
        await session.execute(delete(User).where(User.id == user.id))

    assert await sql_store.get_animal(user.id, animal.id) is None


@pytest.mark.asyncio
async def test_unreachable_database_raises_store_unavailable(tmp_path):
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite'}",
        jwt_secret="x" * 40,
    )
    store = SqlCredentialStore(build_engine(settings))
    try:
        with pytest.raises(StoreUnavailableError) as exc_info:
            await store.find_user_by_email("ann@example.com")
        assert exc_info.value.context["operation"] == "find_user_by_email"
        assert await store.ping() is False
    finally:
        await store.close()


def test_postgres_engine_keeps_server_isolation_level():
    settings = Settings(
        database_url="postgresql+asyncpg://crittertrack:pw@db.example/crittertrack",
        jwt_secret="x" * 40,
        db_pool_size=3,
    )
    with patch("crittertrack.database.create_async_engine") as create_engine:
        build_engine(settings)

    kwargs = create_engine.call_args.kwargs
    assert "isolation_level" not in kwargs
    assert kwargs["pool_size"] == 3
    assert kwargs["max_overflow"] == settings.db_max_overflow
