"""
WebVault Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers, routers and
       the static asset mount; `app` is the module-level instance uvicorn
       serves (uvicorn webvault.main:app).

Middleware (outermost first):
    RequestID → Logging → GZip → CORS → routes

Exception → envelope mapping:
    ValidationError / RequestValidationError   422 fail   validation_failed
    NotFoundError                              404 fail   not_found
    UnauthenticatedError                       401 fail   unauthenticated
    ConflictError                              409 fail   conflict
    UpstreamServiceError                       exc.status_code error  exc.code
    DatabaseError / Exception                  500 error  internal_error

Lifecycle:
    Startup:  logging, configuration check
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from webvault import __version__
from webvault.config import settings
from webvault.database import dispose_engine
from webvault.dependencies import timestamp_style
from webvault.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    UnauthenticatedError,
    UpstreamServiceError,
    ValidationError,
)
from webvault.middleware.logging import RequestLoggingMiddleware
from webvault.middleware.request_id import RequestIDMiddleware, request_id_var
from webvault.routes import (
    admin_activity,
    admin_blog,
    admin_categories,
    admin_collections,
    admin_tags,
    admin_websites,
    auth,
    blog,
    collections,
    favicon,
    health,
    submissions,
    tags,
    websites,
)
from webvault.schemas.envelope import error, fail, field_errors, format_timestamp

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

GENERIC_ERROR_MESSAGE = "An internal error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Root logger to stdout at LOG_LEVEL; chatty libraries held at WARNING."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("WebVault Backend %s starting up (data channel: %s)", __version__, settings.data_channel)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Still serve: health checks and public reads work without these
        logger.warning("Configuration problems: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("WebVault Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def _envelope_response(status_code: int, envelope: BaseModel) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(by_alias=True, mode="json"),
    )


def _fail(request: Request, status_code: int, code: str, message: str, errors=None) -> JSONResponse:
    envelope = fail(
        errors,
        message=message,
        code=code,
        request_id=_request_id(request) or None,
        timestamp=format_timestamp(timestamp_style(request)),
    )
    return _envelope_response(status_code, envelope)


def _error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    envelope = error(
        message,
        code=code,
        request_id=_request_id(request) or None,
        timestamp=format_timestamp(timestamp_style(request)),
    )
    return _envelope_response(status_code, envelope)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to fail (4xx) and error (5xx) envelopes.

    4xx are logged at WARNING, 5xx at ERROR. Exception context and raw
    messages of unexpected errors stay in the logs, never in the response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        return _fail(request, 422, "validation_failed", exc.message, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = field_errors(exc.errors())
        logger.warning("[%s] Request validation failed: %s", _request_id(request), list(errors))
        return _fail(request, 422, "validation_failed", "Validation failed", errors)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        logger.warning("[%s] Not found: %s", _request_id(request), exc.message)
        return _fail(request, 404, "not_found", exc.message)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        logger.warning("[%s] Unauthenticated request to %s", _request_id(request), request.url.path)
        return _fail(request, 401, "unauthenticated", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("[%s] Conflict: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return _fail(request, 409, "conflict", exc.message)

    @app.exception_handler(UpstreamServiceError)
    async def handle_upstream_error(request: Request, exc: UpstreamServiceError):
        logger.error(
            "[%s] Upstream error %s: %s | Context: %s",
            _request_id(request),
            exc.code,
            exc.message,
            exc.context,
        )
        return _error(request, exc.status_code, exc.code, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return _error(request, 500, "internal_error", GENERIC_ERROR_MESSAGE)

    # Route errors are enveloped by RequestIDMiddleware; this covers the layers outside it
    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=True,
        )
        return _error(request, 500, "internal_error", GENERIC_ERROR_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="WebVault API",
        description="Website directory and bookmark manager: public listing, curation and moderation.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Executes in reverse order of addition: RequestID runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(websites.router)
    app.include_router(tags.router)
    app.include_router(collections.router)
    app.include_router(blog.router)
    app.include_router(submissions.router)
    app.include_router(favicon.router)
    app.include_router(auth.router)
    app.include_router(admin_websites.router)
    app.include_router(admin_tags.router)
    app.include_router(admin_categories.router)
    app.include_router(admin_collections.router)
    app.include_router(admin_blog.router)
    app.include_router(admin_activity.router)

    app.mount("/assets", StaticFiles(directory=STATIC_DIR), name="assets")

    return app


app = create_app()
