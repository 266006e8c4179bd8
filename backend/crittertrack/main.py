"""
CritterTrack Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds every component once (credential store, token
       service, password hasher, auth gate, services), parks them on
       app.state, then registers middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn crittertrack.main:app`) and the test suite, which
       calls create_app(settings, store) with its own values.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware:  Request ID → Access Log → GZip → CORS     │
    │                                                         │
    │  Routes:      /api/register  /api/login  /api/user      │
    │               /api/profile   /api/animals /api/litters  │
    │               /api/public/…  /api/upload  /api/files/…  │
    │               /health                                   │
    │                                                         │
    │  Services:    AccountService  AnimalService             │
    │               LitterService   FileService   AuthGate    │
    │                        │                                │
    │  Store:       CredentialStore (sql | rest | memory)     │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, upload directory, optional
              schema creation (DB_CREATE_SCHEMA=true, development only)
    Shutdown: release the store's connection pool / HTTP client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from crittertrack import __version__
from crittertrack.config import Settings
from crittertrack.config import settings as default_settings
from crittertrack.exceptions import (
    ConflictError,
    CritterTrackError,
    FileStorageError,
    NotFoundError,
    StoreUnavailableError,
    UnauthenticatedError,
    ValidationError,
)
from crittertrack.middleware.logging import RequestLoggingMiddleware
from crittertrack.middleware.request_id import RequestIDMiddleware, request_id_var
from crittertrack.routes import animals, auth, files, health, litters, public, users
from crittertrack.services.account_service import AccountService
from crittertrack.services.animal_service import AnimalService
from crittertrack.services.auth_gate import AuthGate
from crittertrack.services.file_service import FileService
from crittertrack.services.litter_service import LitterService
from crittertrack.services.password_hasher import PasswordHasher
from crittertrack.services.token_service import TokenService
from crittertrack.store import CredentialStore, build_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once at startup.

    Format: 2025-03-14T09:26:53 [INFO] crittertrack.access: GET /api/user 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    store: CredentialStore = app.state.store

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("CritterTrack Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health and the logs show what is wrong
        logger.error("Configuration error: %s", str(e))

    app.state.file_service.ensure_storage_root()

    if settings.db_create_schema:
        await store.create_schema()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("CritterTrack Backend shutting down...")
    await store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def _error(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": _request_id(request)}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception taxonomy onto HTTP responses.

        ValidationError, RequestValidationError → 400
        UnauthenticatedError                    → 401 (+ WWW-Authenticate)
        NotFoundError                           → 404
        ConflictError                           → 409
        StoreUnavailableError, FileStorageError → 500 (generic message)
        Exception (fallback)                    → 500 (generic message)

    Internal detail (driver errors, SQL, remote bodies, stack traces) is
    logged server-side and never placed in a response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        return _error(request, 400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # Only location, message and type: raw input may contain a password
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Malformed request: %d error(s)", _request_id(request), len(errors))
        return _error(
            request,
            400,
            "validation_error",
            "The request body or parameters are invalid.",
            details={"errors": errors},
        )

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return _error(
            request,
            401,
            "unauthenticated",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(request, 404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error(request, 409, "conflict", exc.message)

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        logger.error(
            "[%s] Store unavailable: %s | Context: %s",
            _request_id(request),
            exc.message,
            exc.context,
        )
        return _error(request, 500, "server_error", exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            _request_id(request),
            exc.message,
            exc.context,
        )
        return _error(request, 500, "server_error", exc.message)

    @app.exception_handler(CritterTrackError)
    async def handle_app_error(request: Request, exc: CritterTrackError):
        logger.error("[%s] Unhandled application error: %s", _request_id(request), exc.message)
        return _error(request, 500, "server_error", "An internal error occurred.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=True,
        )
        return _error(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[CredentialStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment-loaded instance.
        store:    Credential store; defaults to the strategy named by
                  settings.store_backend.

    Components are constructed here, not in the lifespan, so an app driven
    by httpx.ASGITransport (which does not run lifespan events) is complete.
    """
    settings = settings or default_settings
    store = store or build_store(settings)

    app = FastAPI(
        title="CritterTrack API",
        description=(
            "Record keeping for animal breeders: accounts, animal profiles, "
            "litters and public breeder pages."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Components ────────────────────────────────────────────────────────
    tokens = TokenService(
        secret=settings.jwt_secret,
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        ttl_seconds=settings.jwt_ttl_seconds,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.auth_gate = AuthGate(tokens)
    app.state.account_service = AccountService(
        store=store,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        tokens=tokens,
        password_min_length=settings.password_min_length,
    )
    app.state.animal_service = AnimalService(store)
    app.state.litter_service = LitterService(store)
    app.state.file_service = FileService(
        storage_root=settings.storage_root,
        max_file_size=settings.max_file_size,
    )

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(animals.router)
    app.include_router(litters.router)
    app.include_router(public.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


# uvicorn expects `crittertrack.main:app`
app = create_app()
