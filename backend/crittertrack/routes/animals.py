"""
CritterTrack Backend — Animal Routes
====================================

What:  Authenticated CRUD for the caller's own animals.
How:   Every handler depends on get_identity and passes the Identity to
       AnimalService, which scopes the store query to identity.user_id.
       An id that exists but belongs to someone else is a 404, the same as
       an id that does not exist.

    GET    /api/animals?species=   list (optional species substring filter)
    POST   /api/animals            create → 201 {id}
    GET    /api/animals/{id}       full record
    PUT    /api/animals/{id}       partial update → {message}
    DELETE /api/animals/{id}       → 204
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from crittertrack.dependencies import get_animal_service, get_identity
from crittertrack.schemas.animal import (
    AnimalCreateRequest,
    AnimalResponse,
    AnimalSummary,
    AnimalUpdateRequest,
)
from crittertrack.schemas.common import CreatedResponse, ErrorResponse, MessageResponse
from crittertrack.services.animal_service import AnimalService
from crittertrack.services.auth_gate import Identity

router = APIRouter(prefix="/api/animals", tags=["Animals"])

_UNAUTHENTICATED = {"description": "Missing or invalid token", "model": ErrorResponse}
_NOT_FOUND = {"description": "No such animal for this user", "model": ErrorResponse}


@router.get(
    "",
    response_model=List[AnimalSummary],
    responses={401: _UNAUTHENTICATED},
    summary="List the caller's animals",
)
async def list_animals(
    species: Optional[str] = Query(
        default=None,
        max_length=1024,
        description="Case-insensitive substring match on species",
    ),
    identity: Identity = Depends(get_identity),
    animals: AnimalService = Depends(get_animal_service),
) -> List[AnimalSummary]:
    records = await animals.list(identity, species)
    return [AnimalSummary.model_validate(r) for r in records]


@router.post(
    "",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid animal data", "model": ErrorResponse},
        401: _UNAUTHENTICATED,
    },
    summary="Create an animal",
)
async def create_animal(
    body: AnimalCreateRequest,
    identity: Identity = Depends(get_identity),
    animals: AnimalService = Depends(get_animal_service),
) -> CreatedResponse:
    animal = await animals.create(identity, body.model_dump())
    return CreatedResponse(id=animal.id)


@router.get(
    "/{animal_id}",
    response_model=AnimalResponse,
    responses={401: _UNAUTHENTICATED, 404: _NOT_FOUND},
    summary="Get one of the caller's animals",
)
async def get_animal(
    animal_id: str,
    identity: Identity = Depends(get_identity),
    animals: AnimalService = Depends(get_animal_service),
) -> AnimalResponse:
    animal = await animals.get(identity, animal_id)
    return AnimalResponse.model_validate(animal)


@router.put(
    "/{animal_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid animal data", "model": ErrorResponse},
        401: _UNAUTHENTICATED,
        404: _NOT_FOUND,
    },
    summary="Update one of the caller's animals",
    description="Partial update: absent or null fields keep their stored values.",
)
async def update_animal(
    animal_id: str,
    body: AnimalUpdateRequest,
    identity: Identity = Depends(get_identity),
    animals: AnimalService = Depends(get_animal_service),
) -> MessageResponse:
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    await animals.update(identity, animal_id, fields)
    return MessageResponse(message="Animal updated successfully.")


@router.delete(
    "/{animal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={401: _UNAUTHENTICATED, 404: _NOT_FOUND},
    summary="Delete one of the caller's animals",
)
async def delete_animal(
    animal_id: str,
    identity: Identity = Depends(get_identity),
    animals: AnimalService = Depends(get_animal_service),
) -> Response:
    await animals.delete(identity, animal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
