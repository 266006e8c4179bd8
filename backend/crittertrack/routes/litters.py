"""
CritterTrack Backend — Litter Routes
====================================

Authenticated CRUD for the caller's own litters; same ownership rules
and status codes as routes/animals.py.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from crittertrack.dependencies import get_identity, get_litter_service
from crittertrack.schemas.common import CreatedResponse, ErrorResponse, MessageResponse
from crittertrack.schemas.litter import (
    LitterCreateRequest,
    LitterResponse,
    LitterUpdateRequest,
)
from crittertrack.services.auth_gate import Identity
from crittertrack.services.litter_service import LitterService

router = APIRouter(prefix="/api/litters", tags=["Litters"])

_UNAUTHENTICATED = {"description": "Missing or invalid token", "model": ErrorResponse}
_NOT_FOUND = {"description": "No such litter for this user", "model": ErrorResponse}


@router.get(
    "",
    response_model=List[LitterResponse],
    responses={401: _UNAUTHENTICATED},
    summary="List the caller's litters",
)
async def list_litters(
    identity: Identity = Depends(get_identity),
    litters: LitterService = Depends(get_litter_service),
) -> List[LitterResponse]:
    return [LitterResponse.model_validate(r) for r in await litters.list(identity)]


@router.post(
    "",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid litter data", "model": ErrorResponse},
        401: _UNAUTHENTICATED,
    },
    summary="Create a litter",
)
async def create_litter(
    body: LitterCreateRequest,
    identity: Identity = Depends(get_identity),
    litters: LitterService = Depends(get_litter_service),
) -> CreatedResponse:
    litter = await litters.create(identity, body.model_dump())
    return CreatedResponse(id=litter.id)


@router.get(
    "/{litter_id}",
    response_model=LitterResponse,
    responses={401: _UNAUTHENTICATED, 404: _NOT_FOUND},
    summary="Get one of the caller's litters",
)
async def get_litter(
    litter_id: str,
    identity: Identity = Depends(get_identity),
    litters: LitterService = Depends(get_litter_service),
) -> LitterResponse:
    return LitterResponse.model_validate(await litters.get(identity, litter_id))


@router.put(
    "/{litter_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid litter data", "model": ErrorResponse},
        401: _UNAUTHENTICATED,
        404: _NOT_FOUND,
    },
    summary="Update one of the caller's litters",
)
async def update_litter(
    litter_id: str,
    body: LitterUpdateRequest,
    identity: Identity = Depends(get_identity),
    litters: LitterService = Depends(get_litter_service),
) -> MessageResponse:
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    await litters.update(identity, litter_id, fields)
    return MessageResponse(message="Litter updated successfully.")


@router.delete(
    "/{litter_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={401: _UNAUTHENTICATED, 404: _NOT_FOUND},
    summary="Delete one of the caller's litters",
)
async def delete_litter(
    litter_id: str,
    identity: Identity = Depends(get_identity),
    litters: LitterService = Depends(get_litter_service),
) -> Response:
    await litters.delete(identity, litter_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
