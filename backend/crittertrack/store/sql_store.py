"""
CritterTrack Backend — Direct Relational Credential Store
=========================================================

What:  CredentialStore backed by async SQLAlchemy (PostgreSQL in production,
       SQLite in tests and local development).
How:   Every public method runs inside `_transaction()`, which opens a
       session from the bounded pool, begins a transaction, commits on
       success and rolls back on error. Driver faults are converted to
       StoreUnavailableError; IntegrityError is passed through so callers
       that expect it (registration) can turn it into a typed outcome.

Ownership scoping:
    Animal and litter statements always carry
        WHERE <table>.id = :id AND <table>.user_id = :owner_id
    so a record owned by someone else is indistinguishable from a missing one.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import String, delete, func, or_, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from crittertrack.database import Base, build_session_factory
from crittertrack.exceptions import StoreUnavailableError
from crittertrack.models import Animal, Litter, User
from crittertrack.store.base import (
    AnimalRecord,
    CredentialStore,
    LitterRecord,
    UserRecord,
)

logger = logging.getLogger(__name__)


def _user_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        personal_name=row.personal_name,
        breeder_name=row.breeder_name,
        profile_picture_url=row.profile_picture_url,
        is_breeder_profile=row.is_breeder_profile,
        sequential_id=row.sequential_id,
    )


def _animal_record(row: Animal) -> AnimalRecord:
    return AnimalRecord(
        id=row.id,
        user_id=row.user_id,
        species=row.species,
        name=row.name,
        breeder=row.breeder,
        birth_date=row.birth_date,
        gender=row.gender,
        color_variety=row.color_variety,
        coat_variety=row.coat_variety,
        registry_code=row.registry_code,
        owner=row.owner,
        remarks=row.remarks,
        father_id=row.father_id,
        mother_id=row.mother_id,
        show_on_profile=row.show_on_profile,
        show_registry_code=row.show_registry_code,
        show_owner=row.show_owner,
        show_remarks=row.show_remarks,
        show_parents=row.show_parents,
        genetics_code=row.genetics_code,
        sequential_id=row.sequential_id,
    )


def _litter_record(row: Litter) -> LitterRecord:
    return LitterRecord(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        birth_date=row.birth_date,
        count=row.count,
        parent_ids=list(row.parent_ids or []),
        sequential_id=row.sequential_id,
    )


class SqlCredentialStore(CredentialStore):
    """
    Direct relational store.

    The engine (and therefore the connection pool) is owned by this object
    for the life of the process; `close()` disposes it on shutdown.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Yield a session inside a single transaction.

        IntegrityError propagates unchanged; every other SQLAlchemy or OS
        level failure (including a pool wait that exceeded pool_timeout)
        becomes StoreUnavailableError.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except IntegrityError:
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Store operation '%s' failed: %s: %s",
                operation,
                type(e).__name__,
                str(e),
            )
            raise StoreUnavailableError(
                context={"operation": operation, "error_type": type(e).__name__},
            ) from e

    # ── Users ─────────────────────────────────────────────────────────────

    async def create_user(
        self,
        email: str,
        password_hash: str,
        personal_name: Optional[str] = None,
        breeder_name: Optional[str] = None,
        is_breeder_profile: bool = False,
    ) -> Optional[UserRecord]:
        try:
            async with self._transaction("create_user") as session:
                existing = await session.execute(
                    select(User.sequential_id).where(User.email == email)
                )
                if existing.first() is not None:
                    return None

                user = User(
                    email=email,
                    password_hash=password_hash,
                    personal_name=personal_name,
                    breeder_name=breeder_name,
                    is_breeder_profile=is_breeder_profile,
                )
                session.add(user)
                # Flush assigns sequential_id and surfaces the unique violation
                await session.flush()
                return _user_record(user)
        except IntegrityError:
            logger.info("Registration lost a race on a taken email")
            return None

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        async with self._transaction("find_user_by_email") as session:
            result = await session.execute(select(User).where(User.email == email))
            row = result.scalar_one_or_none()
            return _user_record(row) if row else None

    async def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        async with self._transaction("find_user_by_id") as session:
            result = await session.execute(select(User).where(User.id == user_id))
            row = result.scalar_one_or_none()
            return _user_record(row) if row else None

    async def update_user_profile(
        self, user_id: str, fields: Dict[str, Any]
    ) -> Optional[UserRecord]:
        async with self._transaction("update_user_profile") as session:
            result = await session.execute(select(User).where(User.id == user_id))
            row = result.scalar_one_or_none()
            if row is None:
                return None
            for key, value in fields.items():
                setattr(row, key, value)
            await session.flush()
            return _user_record(row)

    async def search_users(self, term: str) -> List[UserRecord]:
        needle = term.lower()
        personal = func.lower(func.coalesce(User.personal_name, ""), type_=String)
        breeder = func.lower(func.coalesce(User.breeder_name, ""), type_=String)
        query = (
            select(User)
            .where(
                or_(
                    personal.contains(needle, autoescape=True),
                    breeder.contains(needle, autoescape=True),
                )
            )
            .order_by(User.sequential_id)
        )
        async with self._transaction("search_users") as session:
            result = await session.execute(query)
            return [_user_record(row) for row in result.scalars().all()]

    # ── Animals ───────────────────────────────────────────────────────────

    async def create_animal(
        self, owner_id: str, fields: Dict[str, Any]
    ) -> Optional[AnimalRecord]:
        try:
            async with self._transaction("create_animal") as session:
                animal = Animal(user_id=owner_id, **fields)
                session.add(animal)
                await session.flush()
                return _animal_record(animal)
        except IntegrityError:
            # Foreign key on user_id: the owner no longer exists
            logger.warning("create_animal rejected for unknown owner %s", owner_id)
            return None

    async def list_animals(
        self, owner_id: str, species: Optional[str] = None
    ) -> List[AnimalRecord]:
        query = select(Animal).where(Animal.user_id == owner_id)
        if species:
            query = query.where(
                func.lower(Animal.species, type_=String).contains(species.lower(), autoescape=True)
            )
        query = query.order_by(Animal.sequential_id)

        async with self._transaction("list_animals") as session:
            result = await session.execute(query)
            return [_animal_record(row) for row in result.scalars().all()]

    async def get_animal(self, owner_id: str, animal_id: str) -> Optional[AnimalRecord]:
        async with self._transaction("get_animal") as session:
            result = await session.execute(
                select(Animal).where(Animal.id == animal_id, Animal.user_id == owner_id)
            )
            row = result.scalar_one_or_none()
            return _animal_record(row) if row else None

    async def update_animal(
        self, owner_id: str, animal_id: str, fields: Dict[str, Any]
    ) -> int:
        scope = (Animal.id == animal_id, Animal.user_id == owner_id)
        async with self._transaction("update_animal") as session:
            if not fields:
                result = await session.execute(
                    select(func.count()).select_from(Animal).where(*scope)
                )
                return int(result.scalar() or 0)
            result = await session.execute(
                update(Animal)
                .where(*scope)
                .values(**fields)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount or 0

    async def delete_animal(self, owner_id: str, animal_id: str) -> int:
        async with self._transaction("delete_animal") as session:
            result = await session.execute(
                delete(Animal)
                .where(Animal.id == animal_id, Animal.user_id == owner_id)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount or 0

    async def list_public_animals(self, owner_id: str) -> List[AnimalRecord]:
        query = (
            select(Animal)
            .where(Animal.user_id == owner_id, Animal.show_on_profile.is_(True))
            .order_by(Animal.sequential_id)
        )
        async with self._transaction("list_public_animals") as session:
            result = await session.execute(query)
            return [_animal_record(row) for row in result.scalars().all()]

    # ── Litters ───────────────────────────────────────────────────────────

    async def create_litter(
        self, owner_id: str, fields: Dict[str, Any]
    ) -> Optional[LitterRecord]:
        try:
            async with self._transaction("create_litter") as session:
                litter = Litter(user_id=owner_id, **fields)
                session.add(litter)
                await session.flush()
                return _litter_record(litter)
        except IntegrityError:
            logger.warning("create_litter rejected for unknown owner %s", owner_id)
            return None

    async def list_litters(self, owner_id: str) -> List[LitterRecord]:
        async with self._transaction("list_litters") as session:
            result = await session.execute(
                select(Litter).where(Litter.user_id == owner_id).order_by(Litter.sequential_id)
            )
            return [_litter_record(row) for row in result.scalars().all()]

    async def get_litter(self, owner_id: str, litter_id: str) -> Optional[LitterRecord]:
        async with self._transaction("get_litter") as session:
            result = await session.execute(
                select(Litter).where(Litter.id == litter_id, Litter.user_id == owner_id)
            )
            row = result.scalar_one_or_none()
            return _litter_record(row) if row else None

    async def update_litter(
        self, owner_id: str, litter_id: str, fields: Dict[str, Any]
    ) -> int:
        scope = (Litter.id == litter_id, Litter.user_id == owner_id)
        async with self._transaction("update_litter") as session:
            if not fields:
                result = await session.execute(
                    select(func.count()).select_from(Litter).where(*scope)
                )
                return int(result.scalar() or 0)
            result = await session.execute(
                update(Litter)
                .where(*scope)
                .values(**fields)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount or 0

    async def delete_litter(self, owner_id: str, litter_id: str) -> int:
        async with self._transaction("delete_litter") as session:
            result = await session.execute(
                delete(Litter)
                .where(Litter.id == litter_id, Litter.user_id == owner_id)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount or 0

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Store ping failed: %s", str(e))
            return False

    async def close(self) -> None:
        await self.engine.dispose()
