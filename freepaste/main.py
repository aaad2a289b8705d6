"""
FreePaste — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (`uvicorn freepaste.main:app`) or the `freepaste`
       console script.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────┐      │
    │  │ Req ID   │→│  Access logging │→│  GZip    │      │
    │  └──────────┘ └─────────────────┘ └──────────┘      │
    │                                                     │
    │  Routes:                                            │
    │  /api/*   /raw/{id}   /health   /static   / /{id}   │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ Auth→403 │ NotFound→404 │ →500    │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, non-fatal)
    3. Build and connect the paste repository (SQL or Mongo)
    4. Attach PasteService to app.state

    Shutdown:
    1. Close the repository (dispose engine / close client)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from freepaste import __version__
from freepaste.config import settings
from freepaste.exceptions import (
    AuthError,
    FreePasteError,
    IdExhaustedError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from freepaste.middleware.logging import RequestLoggingMiddleware
from freepaste.middleware.request_id import RequestIDMiddleware, request_id_var
from freepaste.repositories import build_repository
from freepaste.repositories.base import PasteRepository
from freepaste.routes import health, pages, pastes, raw
from freepaste.routes.pages import STATIC_DIR
from freepaste.services.paste_service import PasteService

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An internal error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure application-wide logging.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (collected by the container runtime)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

def build_lifespan(repository: Optional[PasteRepository] = None):
    """
    Return the lifespan context for an app.

    Args:
        repository: Adapter to use instead of the one selected by
                    STORAGE_BACKEND (tests pass a SQLite-file repository).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # ── Startup ───────────────────────────────────────────────────────
        setup_logging()
        logger.info("FreePaste %s starting up (environment=%s)", __version__, settings.environment)

        try:
            settings.validate_required_for_production()
        except ValueError as e:
            logger.error("Configuration error: %s", str(e))

        repo = repository or build_repository(settings)
        await repo.connect()
        app.state.paste_service = PasteService(repo, settings)
        logger.info("Storage backend: %s", repo.backend_name)
        logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

        try:
            yield
        finally:
            # ── Shutdown ──────────────────────────────────────────────────
            logger.info("FreePaste shutting down...")
            await repo.close()
            logger.info("Shutdown complete.")

    return lifespan


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, error: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        RequestValidationError  → 400 Bad Request (malformed JSON / wrong types)
        AuthError               → 403 Forbidden
        NotFoundError           → 404 Not Found
        StorageError            → 500 (generic message, context logged)
        IdExhaustedError        → 500 (generic message)
        FreePasteError (base)   → 500
        HTTPException           → its own status (unknown routes → 404)
        Exception (fallback)    → 500, stack trace logged
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Malformed request body on %s", request_id_var.get(""), request.url.path)
        return error_response(400, "validation_error", "Malformed request body")

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        logger.warning("[%s] Authorization error: %s", request_id_var.get(""), exc.message)
        return error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return error_response(500, "server_error", GENERIC_SERVER_ERROR)

    @app.exception_handler(IdExhaustedError)
    async def handle_id_exhausted(request: Request, exc: IdExhaustedError):
        logger.error("[%s] %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", GENERIC_SERVER_ERROR)

    @app.exception_handler(FreePasteError)
    async def handle_app_error(request: Request, exc: FreePasteError):
        logger.error(
            "[%s] Unhandled application error %s: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
        )
        return error_response(500, "server_error", GENERIC_SERVER_ERROR)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, "not_found", "Not found")
        return error_response(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(500, "internal_server_error", GENERIC_SERVER_ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(repository: Optional[PasteRepository] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        repository: Optional pre-built adapter; defaults to build_repository().

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="FreePaste API",
        description=(
            "Minimal pastebin: submit text, get a short link and an owner token, "
            "then view, fetch raw, edit or list your pastes with that token."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=build_lifespan(repository),
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → routes
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(pastes.router)
    app.include_router(raw.router)
    app.include_router(health.router)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    # Catch-all /{paste_id} must come after every fixed path
    app.include_router(pages.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: `freepaste` starts uvicorn with the configured bind."""
    import uvicorn

    uvicorn.run(
        "freepaste.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
