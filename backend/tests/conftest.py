"""
CritterTrack Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any crittertrack import so the
       module-level Settings instance never points at a real database.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:     Settings for a throwaway SQLite file + temp storage
    ├── memory_store:      InMemoryCredentialStore
    ├── sql_store:         SqlCredentialStore on aiosqlite, schema created
    ├── store:             parametrized over memory_store and sql_store
    ├── token_service:     TokenService with the test secret
    ├── account_service:   AccountService over memory_store (bcrypt rounds=4)
    ├── sample_image_bytes
    └── test_client:       HTTPX AsyncClient bound to create_app(...)
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["STORE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="crittertrack_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from crittertrack.config import Settings
from crittertrack.database import build_engine
from crittertrack.services.account_service import AccountService
from crittertrack.services.auth_gate import Identity
from crittertrack.services.password_hasher import PasswordHasher
from crittertrack.services.token_service import TokenService
from crittertrack.store.memory_store import InMemoryCredentialStore
from crittertrack.store.sql_store import SqlCredentialStore

TEST_SECRET = os.environ["JWT_SECRET"]


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        store_backend="memory",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'crittertrack.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        storage_root=str(tmp_path / "storage"),
        log_level="WARNING",
    )


@pytest.fixture
def memory_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest_asyncio.fixture
async def sql_store(test_settings):
    """
    SqlCredentialStore on a fresh SQLite file.

    A file (not :memory:) so that concurrent sessions get separate
    connections and really contend for the write lock.
    """
    store = SqlCredentialStore(build_engine(test_settings))
    await store.create_schema()
    yield store
    await store.close()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request, test_settings):
    """Runs a test once per store strategy that needs no network."""
    if request.param == "memory":
        yield InMemoryCredentialStore()
        return
    sql = SqlCredentialStore(build_engine(test_settings))
    await sql.create_schema()
    yield sql
    await sql.close()


@pytest.fixture
def token_service(test_settings) -> TokenService:
    return TokenService(
        secret=test_settings.jwt_secret,
        audience=test_settings.jwt_audience,
        issuer=test_settings.jwt_issuer,
        ttl_seconds=test_settings.jwt_ttl_seconds,
    )


@pytest.fixture
def account_service(memory_store, token_service) -> AccountService:
    return AccountService(
        store=memory_store,
        hasher=PasswordHasher(rounds=4),
        tokens=token_service,
        password_min_length=12,
    )


@pytest_asyncio.fixture
async def owner(store) -> Identity:
    """A registered user on the parametrized store, as an Identity."""
    user = await store.create_user("owner@example.com", "hash-not-checked-here")
    return Identity(user_id=user.id)


@pytest_asyncio.fixture
async def stranger(store) -> Identity:
    user = await store.create_user("stranger@example.com", "hash-not-checked-here")
    return Identity(user_id=user.id)


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Smallest JPEG header: SOI + JFIF APP0 + EOI. Enough for libmagic."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


@pytest_asyncio.fixture
async def test_client(test_settings, memory_store):
    """
    HTTPX AsyncClient talking to a fresh app over ASGITransport.

    Lifespan events do not run under ASGITransport; create_app builds every
    component up front, so nothing is missing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from crittertrack.main import create_app

    app = create_app(settings=test_settings, store=memory_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
