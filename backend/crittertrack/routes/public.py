"""
CritterTrack Backend — Public Profile Routes
============================================

What:  Unauthenticated read-only views of breeders and their animals.

    GET /api/public/animals/list/{ownerId}          animals with showOnProfile
    GET /api/public/animals/{ownerId}/{animalId}    one visible animal, redacted
    GET /api/public/user/{ownerId}                  public user (no email)
    GET /api/public/users/search?q=                 search by personal/breeder name

An animal that exists but is not shown on the profile is a 404 here.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from crittertrack.dependencies import get_account_service, get_animal_service
from crittertrack.schemas.animal import AnimalResponse, AnimalSummary
from crittertrack.schemas.common import ErrorResponse
from crittertrack.schemas.user import PublicUserResponse
from crittertrack.services.account_service import AccountService
from crittertrack.services.animal_service import AnimalService

router = APIRouter(prefix="/api/public", tags=["Public"])


@router.get(
    "/animals/list/{owner_id}",
    response_model=List[AnimalSummary],
    summary="List a user's public animals",
)
async def list_public_animals(
    owner_id: str,
    animals: AnimalService = Depends(get_animal_service),
) -> List[AnimalSummary]:
    return [AnimalSummary.model_validate(r) for r in await animals.list_public(owner_id)]


@router.get(
    "/animals/{owner_id}/{animal_id}",
    response_model=AnimalResponse,
    responses={404: {"description": "No such public animal", "model": ErrorResponse}},
    summary="Get one public animal",
    description="Fields whose visibility flag is off are returned as null.",
)
async def get_public_animal(
    owner_id: str,
    animal_id: str,
    animals: AnimalService = Depends(get_animal_service),
) -> AnimalResponse:
    return AnimalResponse.model_validate(await animals.get_public(owner_id, animal_id))


@router.get(
    "/user/{owner_id}",
    response_model=PublicUserResponse,
    responses={404: {"description": "No such user", "model": ErrorResponse}},
    summary="Get a user's public profile",
)
async def get_public_user(
    owner_id: str,
    accounts: AccountService = Depends(get_account_service),
) -> PublicUserResponse:
    return PublicUserResponse.model_validate(await accounts.get_public_user(owner_id))


@router.get(
    "/users/search",
    response_model=List[PublicUserResponse],
    responses={400: {"description": "Missing search term", "model": ErrorResponse}},
    summary="Search users by personal or breeder name",
)
async def search_users(
    q: Optional[str] = Query(default=None, max_length=256, description="Search term"),
    accounts: AccountService = Depends(get_account_service),
) -> List[PublicUserResponse]:
    return [PublicUserResponse.model_validate(u) for u in await accounts.search_users(q)]
