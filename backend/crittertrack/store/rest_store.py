"""
CritterTrack Backend — Proxied REST Credential Store
====================================================

What:  CredentialStore that talks to a PostgREST-style data API
       (Supabase `/rest/v1/<table>` endpoints) over HTTP.
Why:   Lets the API run against a hosted database without holding a direct
       database connection; this process stays the only thing that sees
       the data API key.
How:   One httpx.AsyncClient (connection pool) for the life of the process.
       Filters are expressed as PostgREST query parameters:
           ?id=eq.<id>&user_id=eq.<owner>   owner scoping
           ?species=imatch.<escaped term>    literal, case-insensitive substring
           ?order=sequential_id.asc         stable ordering
       Writes send `Prefer: return=representation`, so the affected rows
       come back in the response body and their count is the match count.

Status handling:
    200 / 201         success
    409               unique violation (create_user → None)
    23503 in body     foreign key violation (create → None)
    anything else     StoreUnavailableError (logged, never retried)
    transport errors  StoreUnavailableError
    non-JSON body     StoreUnavailableError
"""

import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from crittertrack.exceptions import StoreUnavailableError
from crittertrack.store.base import (
    AnimalRecord,
    CredentialStore,
    LitterRecord,
    UserRecord,
)

logger = logging.getLogger(__name__)

USERS = "users"
ANIMALS = "animals"
LITTERS = "litters"

ORDER = "sequential_id.asc"
RETURN_REPRESENTATION = {"Prefer": "return=representation"}


def _eq(value: str) -> str:
    return f"eq.{value}"


def _substring_regex(term: str) -> str:
    """
    Regex matching `term` literally, for the `imatch` (~*) operator.

    ilike cannot express a literal `*` through PostgREST, so substring
    search goes through a fully escaped case-insensitive regex instead.
    """
    return re.escape(term)


def _quoted(value: str) -> str:
    # Inside or=(...) a value with , ( ) must be double-quoted, and " and \
    # inside the quotes are backslash-escaped
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _parse_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _to_json(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, date) else value
        for key, value in fields.items()
    }


def _user_record(row: Dict[str, Any]) -> UserRecord:
    return UserRecord(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        personal_name=row.get("personal_name"),
        breeder_name=row.get("breeder_name"),
        profile_picture_url=row.get("profile_picture_url"),
        is_breeder_profile=bool(row.get("is_breeder_profile", False)),
        sequential_id=int(row.get("sequential_id") or 0),
    )


def _animal_record(row: Dict[str, Any]) -> AnimalRecord:
    return AnimalRecord(
        id=row["id"],
        user_id=row["user_id"],
        species=row["species"],
        name=row.get("name"),
        breeder=row.get("breeder"),
        birth_date=_parse_date(row.get("birth_date")),
        gender=row.get("gender"),
        color_variety=row.get("color_variety"),
        coat_variety=row.get("coat_variety"),
        registry_code=row.get("registry_code"),
        owner=row.get("owner"),
        remarks=row.get("remarks"),
        father_id=row.get("father_id"),
        mother_id=row.get("mother_id"),
        show_on_profile=bool(row.get("show_on_profile", False)),
        show_registry_code=bool(row.get("show_registry_code", False)),
        show_owner=bool(row.get("show_owner", False)),
        show_remarks=bool(row.get("show_remarks", False)),
        show_parents=bool(row.get("show_parents", False)),
        genetics_code=row.get("genetics_code"),
        sequential_id=int(row.get("sequential_id") or 0),
    )


def _litter_record(row: Dict[str, Any]) -> LitterRecord:
    return LitterRecord(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        birth_date=_parse_date(row["birth_date"]),
        count=int(row.get("count") or 0),
        parent_ids=list(row.get("parent_ids") or []),
        sequential_id=int(row.get("sequential_id") or 0),
    )


class RestCredentialStore(CredentialStore):
    """
    Credential store backed by a remote PostgREST data API.

    Args:
        base_url:  Project URL, e.g. https://yourproject.supabase.co
        api_key:   Service key sent as `apikey` and as a bearer token
        timeout:   Per-request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"apikey": api_key, "Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(
                method, f"/{table}", params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(
                "Data API %s /%s failed: %s: %s", method, table, type(e).__name__, str(e)
            )
            raise StoreUnavailableError(
                context={"table": table, "error_type": type(e).__name__},
            ) from e

    def _unexpected(self, response: httpx.Response, operation: str) -> StoreUnavailableError:
        logger.error(
            "Data API returned %d for %s: %s",
            response.status_code,
            operation,
            response.text[:500],
        )
        return StoreUnavailableError(
            context={"operation": operation, "status_code": response.status_code},
        )

    def _json(self, response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "Data API sent a non-JSON body for %s: %s", operation, response.text[:500]
            )
            raise StoreUnavailableError(
                context={"operation": operation, "error_type": type(e).__name__},
            ) from e

    async def _select(
        self, table: str, params: Dict[str, str], operation: str
    ) -> List[Dict[str, Any]]:
        response = await self._request("GET", table, params={"select": "*", **params})
        if response.status_code != 200:
            raise self._unexpected(response, operation)
        return self._json(response, operation)

    async def _insert(
        self, table: str, payload: Dict[str, Any], operation: str
    ) -> Optional[Dict[str, Any]]:
        """POST one row; None on a unique or foreign key violation."""
        response = await self._request(
            "POST", table, json=_to_json(payload), headers=RETURN_REPRESENTATION
        )
        if response.status_code in (200, 201):
            rows = self._json(response, operation)
            return rows[0] if rows else None
        if response.status_code == 409 or _is_fk_violation(response):
            logger.info("Data API rejected %s with %d", operation, response.status_code)
            return None
        raise self._unexpected(response, operation)

    async def _scoped_write(
        self,
        method: str,
        table: str,
        owner_id: str,
        record_id: str,
        operation: str,
        fields: Optional[Dict[str, Any]] = None,
    ) -> int:
        params = {"id": _eq(record_id), "user_id": _eq(owner_id)}
        response = await self._request(
            method,
            table,
            params=params,
            json=_to_json(fields) if fields is not None else None,
            headers=RETURN_REPRESENTATION,
        )
        if response.status_code != 200:
            raise self._unexpected(response, operation)
        return len(self._json(response, operation))

    # ── Users ─────────────────────────────────────────────────────────────

    async def create_user(
        self,
        email: str,
        password_hash: str,
        personal_name: Optional[str] = None,
        breeder_name: Optional[str] = None,
        is_breeder_profile: bool = False,
    ) -> Optional[UserRecord]:
        # The remote unique index on users.email makes the insert itself the
        # existence check; a duplicate comes back as 409.
        row = await self._insert(
            USERS,
            {
                "email": email,
                "password_hash": password_hash,
                "personal_name": personal_name,
                "breeder_name": breeder_name,
                "is_breeder_profile": is_breeder_profile,
            },
            "create_user",
        )
        return _user_record(row) if row else None

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        rows = await self._select(USERS, {"email": _eq(email)}, "find_user_by_email")
        return _user_record(rows[0]) if rows else None

    async def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        rows = await self._select(USERS, {"id": _eq(user_id)}, "find_user_by_id")
        return _user_record(rows[0]) if rows else None

    async def update_user_profile(
        self, user_id: str, fields: Dict[str, Any]
    ) -> Optional[UserRecord]:
        if not fields:
            return await self.find_user_by_id(user_id)
        response = await self._request(
            "PATCH",
            USERS,
            params={"id": _eq(user_id)},
            json=_to_json(fields),
            headers=RETURN_REPRESENTATION,
        )
        if response.status_code != 200:
            raise self._unexpected(response, "update_user_profile")
        rows = self._json(response, "update_user_profile")
        return _user_record(rows[0]) if rows else None

    async def search_users(self, term: str) -> List[UserRecord]:
        pattern = _quoted(_substring_regex(term))
        rows = await self._select(
            USERS,
            {
                "or": f"(personal_name.imatch.{pattern},breeder_name.imatch.{pattern})",
                "order": ORDER,
            },
            "search_users",
        )
        return [_user_record(row) for row in rows]

    # ── Animals ───────────────────────────────────────────────────────────

    async def create_animal(
        self, owner_id: str, fields: Dict[str, Any]
    ) -> Optional[AnimalRecord]:
        row = await self._insert(ANIMALS, {**fields, "user_id": owner_id}, "create_animal")
        return _animal_record(row) if row else None

    async def list_animals(
        self, owner_id: str, species: Optional[str] = None
    ) -> List[AnimalRecord]:
        params = {"user_id": _eq(owner_id), "order": ORDER}
        if species:
            params["species"] = f"imatch.{_substring_regex(species)}"
        rows = await self._select(ANIMALS, params, "list_animals")
        return [_animal_record(row) for row in rows]

    async def get_animal(self, owner_id: str, animal_id: str) -> Optional[AnimalRecord]:
        rows = await self._select(
            ANIMALS, {"id": _eq(animal_id), "user_id": _eq(owner_id)}, "get_animal"
        )
        return _animal_record(rows[0]) if rows else None

    async def update_animal(
        self, owner_id: str, animal_id: str, fields: Dict[str, Any]
    ) -> int:
        if not fields:
            return 1 if await self.get_animal(owner_id, animal_id) else 0
        return await self._scoped_write(
            "PATCH", ANIMALS, owner_id, animal_id, "update_animal", fields
        )

    async def delete_animal(self, owner_id: str, animal_id: str) -> int:
        return await self._scoped_write("DELETE", ANIMALS, owner_id, animal_id, "delete_animal")

    async def list_public_animals(self, owner_id: str) -> List[AnimalRecord]:
        rows = await self._select(
            ANIMALS,
            {"user_id": _eq(owner_id), "show_on_profile": "is.true", "order": ORDER},
            "list_public_animals",
        )
        return [_animal_record(row) for row in rows]

    # ── Litters ───────────────────────────────────────────────────────────

    async def create_litter(
        self, owner_id: str, fields: Dict[str, Any]
    ) -> Optional[LitterRecord]:
        row = await self._insert(LITTERS, {**fields, "user_id": owner_id}, "create_litter")
        return _litter_record(row) if row else None

    async def list_litters(self, owner_id: str) -> List[LitterRecord]:
        rows = await self._select(
            LITTERS, {"user_id": _eq(owner_id), "order": ORDER}, "list_litters"
        )
        return [_litter_record(row) for row in rows]

    async def get_litter(self, owner_id: str, litter_id: str) -> Optional[LitterRecord]:
        rows = await self._select(
            LITTERS, {"id": _eq(litter_id), "user_id": _eq(owner_id)}, "get_litter"
        )
        return _litter_record(rows[0]) if rows else None

    async def update_litter(
        self, owner_id: str, litter_id: str, fields: Dict[str, Any]
    ) -> int:
        if not fields:
            return 1 if await self.get_litter(owner_id, litter_id) else 0
        return await self._scoped_write(
            "PATCH", LITTERS, owner_id, litter_id, "update_litter", fields
        )

    async def delete_litter(self, owner_id: str, litter_id: str) -> int:
        return await self._scoped_write("DELETE", LITTERS, owner_id, litter_id, "delete_litter")

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def ping(self) -> bool:
        try:
            response = await self._client.get(f"/{USERS}", params={"select": "id", "limit": "1"})
        except httpx.HTTPError as e:
            logger.warning("Data API ping failed: %s", str(e))
            return False
        return response.status_code == 200

    async def close(self) -> None:
        await self._client.aclose()


def _is_fk_violation(response: httpx.Response) -> bool:
    if response.status_code != 400:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("code") == "23503"
