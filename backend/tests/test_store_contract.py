"""
CritterTrack Backend — Credential Store Contract Tests
======================================================

What:  Behaviour every CredentialStore must share, run against the
       in-memory store and the SQL store (aiosqlite) via the parametrized
       `store` fixture in conftest.py.

What we test:
    ✅ unique email; sequential ids increase
    ✅ owner scoping: another user's record is absent (None / 0)
    ✅ partial update leaves unspecified fields alone; empty update counts
    ✅ delete is terminal (second delete → 0)
    ✅ species filter and user search are case-insensitive substrings
    ✅ public list only includes show_on_profile animals
"""

from datetime import date

import pytest


class TestUsers:

    @pytest.mark.asyncio
    async def test_create_and_find(self, store):
        created = await store.create_user("ann@example.com", "$2b$hash", personal_name="Ann")

        by_email = await store.find_user_by_email("ann@example.com")
        by_id = await store.find_user_by_id(created.id)

        assert by_email.id == by_id.id == created.id
        assert by_id.personal_name == "Ann"
        assert by_id.is_breeder_profile is False

    @pytest.mark.asyncio
    async def test_duplicate_email_returns_none(self, store):
        assert await store.create_user("ann@example.com", "h1") is not None
        assert await store.create_user("ann@example.com", "h2") is None

    @pytest.mark.asyncio
    async def test_sequential_ids_increase(self, store):
        first = await store.create_user("a@example.com", "h")
        second = await store.create_user("b@example.com", "h")
        assert 0 < first.sequential_id < second.sequential_id

    @pytest.mark.asyncio
    async def test_missing_user_lookups(self, store):
        assert await store.find_user_by_email("ghost@example.com") is None
        assert await store.find_user_by_id("ghost") is None
        assert await store.update_user_profile("ghost", {"personal_name": "x"}) is None

    @pytest.mark.asyncio
    async def test_update_profile_is_partial(self, store):
        user = await store.create_user("ann@example.com", "h", personal_name="Ann", breeder_name="Willow")

        updated = await store.update_user_profile(user.id, {"is_breeder_profile": True})

        assert updated.is_breeder_profile is True
        assert updated.personal_name == "Ann"
        assert updated.breeder_name == "Willow"

    @pytest.mark.asyncio
    async def test_search_treats_null_names_as_empty(self, store):
        await store.create_user("a@example.com", "h", personal_name="Marta")
        await store.create_user("b@example.com", "h", breeder_name="MARigold Mousery")
        await store.create_user("c@example.com", "h")

        found = await store.search_users("mar")

        assert [u.email for u in found] == ["a@example.com", "b@example.com"]

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(self, store):
        await store.create_user("a@example.com", "h", personal_name="Ann")
        assert await store.search_users("%") == []
        assert await store.search_users("_") == []


class TestAnimals:

    @pytest.mark.asyncio
    async def test_create_get_roundtrip(self, store, owner):
        created = await store.create_animal(
            owner.user_id,
            {"species": "Fancy Rat", "name": "Pip", "birth_date": date(2024, 5, 1)},
        )

        fetched = await store.get_animal(owner.user_id, created.id)

        assert fetched.name == "Pip"
        assert fetched.species == "Fancy Rat"
        assert fetched.birth_date == date(2024, 5, 1)
        assert fetched.user_id == owner.user_id
        assert fetched.show_on_profile is False

    @pytest.mark.asyncio
    async def test_create_for_unknown_owner_returns_none(self, store):
        assert await store.create_animal("ghost", {"species": "Mouse"}) is None

    @pytest.mark.asyncio
    async def test_other_owner_sees_nothing(self, store, owner, stranger):
        animal = await store.create_animal(owner.user_id, {"species": "Mouse"})

        assert await store.get_animal(stranger.user_id, animal.id) is None
        assert await store.update_animal(stranger.user_id, animal.id, {"name": "Stolen"}) == 0
        assert await store.delete_animal(stranger.user_id, animal.id) == 0
        assert await store.list_animals(stranger.user_id) == []

        untouched = await store.get_animal(owner.user_id, animal.id)
        assert untouched.name is None

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, store, owner):
        animal = await store.create_animal(
            owner.user_id, {"species": "Mouse", "name": "Pip", "remarks": "Calm"}
        )

        assert await store.update_animal(owner.user_id, animal.id, {"name": "Pippa"}) == 1

        updated = await store.get_animal(owner.user_id, animal.id)
        assert updated.name == "Pippa"
        assert updated.remarks == "Calm"
        assert updated.species == "Mouse"

    @pytest.mark.asyncio
    async def test_empty_update_reports_match_count(self, store, owner):
        animal = await store.create_animal(owner.user_id, {"species": "Mouse"})

        assert await store.update_animal(owner.user_id, animal.id, {}) == 1
        assert await store.update_animal(owner.user_id, "missing", {}) == 0

    @pytest.mark.asyncio
    async def test_delete_is_terminal(self, store, owner):
        animal = await store.create_animal(owner.user_id, {"species": "Mouse"})

        assert await store.delete_animal(owner.user_id, animal.id) == 1
        assert await store.delete_animal(owner.user_id, animal.id) == 0
        assert await store.get_animal(owner.user_id, animal.id) is None

    @pytest.mark.asyncio
    async def test_list_in_creation_order_with_species_filter(self, store, owner):
        for species in ["Fancy Rat", "Mouse", "Dumbo RAT"]:
            await store.create_animal(owner.user_id, {"species": species})

        everything = await store.list_animals(owner.user_id)
        rats = await store.list_animals(owner.user_id, species="rat")

        assert [a.species for a in everything] == ["Fancy Rat", "Mouse", "Dumbo RAT"]
        assert [a.species for a in rats] == ["Fancy Rat", "Dumbo RAT"]

    @pytest.mark.asyncio
    async def test_dangling_parent_ids_are_accepted(self, store, owner):
        animal = await store.create_animal(
            owner.user_id, {"species": "Mouse", "father_id": "never-existed", "mother_id": "gone"}
        )
        fetched = await store.get_animal(owner.user_id, animal.id)
        assert fetched.father_id == "never-existed"

    @pytest.mark.asyncio
    async def test_public_list_only_shows_visible(self, store, owner):
        shown = await store.create_animal(owner.user_id, {"species": "Mouse", "show_on_profile": True})
        await store.create_animal(owner.user_id, {"species": "Rat", "show_on_profile": False})

        public = await store.list_public_animals(owner.user_id)

        assert [a.id for a in public] == [shown.id]


class TestLitters:

    @pytest.mark.asyncio
    async def test_crud_cycle(self, store, owner):
        litter = await store.create_litter(
            owner.user_id,
            {"name": "Spring A", "birth_date": date(2025, 3, 1), "count": 7, "parent_ids": ["x", "y"]},
        )
        assert litter.parent_ids == ["x", "y"]

        assert await store.update_litter(owner.user_id, litter.id, {"count": 6}) == 1
        fetched = await store.get_litter(owner.user_id, litter.id)
        assert fetched.count == 6
        assert fetched.name == "Spring A"
        assert fetched.parent_ids == ["x", "y"]

        assert [item.id for item in await store.list_litters(owner.user_id)] == [litter.id]
        assert await store.delete_litter(owner.user_id, litter.id) == 1
        assert await store.delete_litter(owner.user_id, litter.id) == 0

    @pytest.mark.asyncio
    async def test_other_owner_sees_nothing(self, store, owner, stranger):
        litter = await store.create_litter(
            owner.user_id, {"name": "Spring A", "birth_date": date(2025, 3, 1)}
        )

        assert await store.get_litter(stranger.user_id, litter.id) is None
        assert await store.update_litter(stranger.user_id, litter.id, {"count": 1}) == 0
        assert await store.delete_litter(stranger.user_id, litter.id) == 0
        assert await store.list_litters(stranger.user_id) == []

    @pytest.mark.asyncio
    async def test_ping(self, store):
        assert await store.ping() is True
