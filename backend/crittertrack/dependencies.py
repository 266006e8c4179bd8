"""
CritterTrack Backend — FastAPI Dependencies
===========================================

What:  Accessors that hand the per-app components (built once in
       create_app and parked on app.state) to route handlers, plus the
       `get_identity` dependency every authenticated route declares.

`HTTPBearer(auto_error=False)` turns a missing or non-Bearer Authorization
header into None instead of FastAPI's own 403, so the AuthGate produces the
one uniform 401 for every authentication failure.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crittertrack.services.account_service import AccountService
from crittertrack.services.animal_service import AnimalService
from crittertrack.services.auth_gate import AuthGate, Identity
from crittertrack.services.file_service import FileService
from crittertrack.services.litter_service import LitterService

bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by /api/login")


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_animal_service(request: Request) -> AnimalService:
    return request.app.state.animal_service


def get_litter_service(request: Request) -> LitterService:
    return request.app.state.litter_service


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    gate: AuthGate = Depends(get_auth_gate),
) -> Identity:
    return gate.authenticate(credentials.credentials if credentials else None)
