"""
CritterTrack Backend — REST Store Tests
=======================================

RestCredentialStore against httpx.MockTransport, so every request the store
makes is inspected without a network.

What we test:
    ✅ key headers and PostgREST filter parameters
    ✅ search and species terms are escaped and matched literally
    ✅ 409 on insert → None (email taken); 23503 → None (unknown owner)
    ✅ scoped writes report the number of returned rows
    ✅ non-2xx and transport failures → StoreUnavailableError
    ✅ a 2xx response with a non-JSON body → StoreUnavailableError
"""

import json
from datetime import date

import httpx
import pytest

from crittertrack.exceptions import StoreUnavailableError
from crittertrack.store.rest_store import RestCredentialStore

BASE_URL = "https://project.example.co"
API_KEY = "service-key"

USER_ROW = {
    "id": "u-1",
    "email": "ann@example.com",
    "password_hash": "$2b$hash",
    "personal_name": "Ann",
    "breeder_name": None,
    "profile_picture_url": None,
    "is_breeder_profile": False,
    "sequential_id": 1,
}

ANIMAL_ROW = {
    "id": "a-1",
    "user_id": "u-1",
    "species": "Mouse",
    "name": "Pip",
    "birth_date": "2024-05-01",
    "show_on_profile": True,
    "sequential_id": 3,
}


class Recorder:
    """Mock handler that records requests and replays a canned response."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else []
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_store(handler) -> RestCredentialStore:
    return RestCredentialStore(BASE_URL, API_KEY, transport=httpx.MockTransport(handler))


class TestRequests:

    @pytest.mark.asyncio
    async def test_headers_and_path(self):
        handler = Recorder(body=[USER_ROW])
        store = make_store(handler)

        user = await store.find_user_by_email("ann@example.com")

        request = handler.last
        assert request.url.path == "/rest/v1/users"
        assert request.url.params["email"] == "eq.ann@example.com"
        assert request.headers["apikey"] == API_KEY
        assert request.headers["authorization"] == f"Bearer {API_KEY}"
        assert user.id == "u-1"
        assert user.personal_name == "Ann"
        await store.close()

    @pytest.mark.asyncio
    async def test_owner_scoped_get(self):
        handler = Recorder(body=[ANIMAL_ROW])
        store = make_store(handler)

        animal = await store.get_animal("u-1", "a-1")

        params = handler.last.url.params
        assert params["id"] == "eq.a-1"
        assert params["user_id"] == "eq.u-1"
        assert animal.birth_date == date(2024, 5, 1)
        await store.close()

    @pytest.mark.asyncio
    async def test_species_filter_and_order(self):
        handler = Recorder(body=[ANIMAL_ROW])
        store = make_store(handler)

        await store.list_animals("u-1", species="Rat")

        params = handler.last.url.params
        assert params["species"] == "imatch.Rat"
        assert params["order"] == "sequential_id.asc"
        await store.close()

    @pytest.mark.asyncio
    async def test_species_wildcards_sent_literally(self):
        handler = Recorder(body=[])
        store = make_store(handler)

        await store.list_animals("u-1", species="%_*")

        assert handler.last.url.params["species"] == r"imatch.%_\*"
        await store.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "term, quoted",
        [
            ("a,b(c)", r'"a,b\\(c\\)"'),
            ("()", r'"\\(\\)"'),
            ("%", '"%"'),
            ("Smith, Jr.", r'"Smith,\\ Jr\\."'),
        ],
    )
    async def test_search_term_escaped_and_quoted(self, term, quoted):
        handler = Recorder(body=[])
        store = make_store(handler)

        await store.search_users(term)

        assert handler.last.url.params["or"] == (
            f"(personal_name.imatch.{quoted},breeder_name.imatch.{quoted})"
        )
        await store.close()

    @pytest.mark.asyncio
    async def test_public_list_filters_visibility(self):
        handler = Recorder(body=[])
        store = make_store(handler)

        await store.list_public_animals("u-1")

        assert handler.last.url.params["show_on_profile"] == "is.true"
        await store.close()


class TestWrites:

    @pytest.mark.asyncio
    async def test_create_user_returns_record(self):
        handler = Recorder(status_code=201, body=[USER_ROW])
        store = make_store(handler)

        user = await store.create_user("ann@example.com", "$2b$hash", personal_name="Ann")

        request = handler.last
        assert request.method == "POST"
        assert request.headers["prefer"] == "return=representation"
        assert json.loads(request.content)["email"] == "ann@example.com"
        assert user.id == "u-1"
        await store.close()

    @pytest.mark.asyncio
    async def test_duplicate_email_returns_none(self):
        store = make_store(Recorder(status_code=409, body={"code": "23505"}))
        assert await store.create_user("ann@example.com", "h") is None
        await store.close()

    @pytest.mark.asyncio
    async def test_unknown_owner_returns_none(self):
        store = make_store(Recorder(status_code=400, body={"code": "23503"}))
        assert await store.create_animal("ghost", {"species": "Mouse"}) is None
        await store.close()

    @pytest.mark.asyncio
    async def test_dates_sent_as_iso_strings(self):
        handler = Recorder(status_code=201, body=[ANIMAL_ROW])
        store = make_store(handler)

        await store.create_animal("u-1", {"species": "Mouse", "birth_date": date(2024, 5, 1)})

        payload = json.loads(handler.last.content)
        assert payload["birth_date"] == "2024-05-01"
        assert payload["user_id"] == "u-1"
        await store.close()

    @pytest.mark.asyncio
    async def test_update_counts_returned_rows(self):
        handler = Recorder(body=[ANIMAL_ROW])
        store = make_store(handler)

        assert await store.update_animal("u-1", "a-1", {"name": "Pippa"}) == 1

        request = handler.last
        assert request.method == "PATCH"
        assert request.url.params["user_id"] == "eq.u-1"
        await store.close()

    @pytest.mark.asyncio
    async def test_delete_of_missing_row_is_zero(self):
        store = make_store(Recorder(body=[]))
        assert await store.delete_litter("u-1", "l-1") == 0
        await store.close()

    @pytest.mark.asyncio
    async def test_empty_update_checks_existence(self):
        handler = Recorder(body=[ANIMAL_ROW])
        store = make_store(handler)

        assert await store.update_animal("u-1", "a-1", {}) == 1
        assert handler.last.method == "GET"
        await store.close()


class TestFailures:

    @pytest.mark.asyncio
    async def test_server_error_raises_store_unavailable(self):
        store = make_store(Recorder(status_code=500, body={"message": "boom"}))
        with pytest.raises(StoreUnavailableError):
            await store.find_user_by_id("u-1")
        await store.close()

    @pytest.mark.asyncio
    async def test_unexpected_insert_status_raises(self):
        store = make_store(Recorder(status_code=400, body={"code": "22P02"}))
        with pytest.raises(StoreUnavailableError):
            await store.create_animal("u-1", {"species": "Mouse"})
        await store.close()

    @pytest.mark.asyncio
    async def test_transport_error_raises_store_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = make_store(handler)
        with pytest.raises(StoreUnavailableError):
            await store.list_litters("u-1")
        assert await store.ping() is False
        await store.close()

    @pytest.mark.asyncio
    async def test_non_json_body_raises_store_unavailable(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway maintenance</html>")

        store = make_store(handler)
        with pytest.raises(StoreUnavailableError):
            await store.find_user_by_id("u-1")
        with pytest.raises(StoreUnavailableError):
            await store.update_animal("u-1", "a-1", {"name": "Pippa"})
        await store.close()
