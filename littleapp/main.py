"""
Little Application: FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the app around an explicitly passed
       Settings object: the Database, middleware, exception handlers and
       routers. Handlers reach the settings and database via app.state.
Who:   run() (the `littleapp` console script), uvicorn's --factory mode,
       and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────────────┐
    │                        FastAPI App                          │
    │                                                             │
    │  Middleware:  Rate Limit → Request ID → Logging → GZip/CORS │
    │                                                             │
    │  Routes:      /api/v1/posts      /api/v1/courses            │
    │               /api/v1/auth       /health                    │
    │                                                             │
    │  Exception Handlers:                                        │
    │    Validation→400  Auth→401  Forbidden→403  NotFound→404    │
    │    Database/File→500  anything else→500 (process survives)  │
    └─────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  validate configuration, wait for the database (tenacity
              retries), optionally create tables, ensure the upload dir.
    Shutdown: dispose the database engine.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from littleapp import __version__
from littleapp.config import Settings
from littleapp.database import Database
from littleapp.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    FileStorageError,
    LittleAppError,
    NotFoundError,
    ValidationError,
)
from littleapp.middleware.logging import RequestLoggingMiddleware
from littleapp.middleware.rate_limit import RateLimitMiddleware
from littleapp.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    current_request_id,
)
from littleapp.routes import auth, courses, health, posts, reviews, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once, writing to stdout.

    Format: 2024-01-15T12:00:00 [INFO] littleapp.access: GET /api/v1/posts 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    logger.info("Little Application %s starting (%s)", __version__, settings.environment)

    # Fails startup on an insecure production configuration
    settings.validate_required_for_production()

    await database.wait_until_ready()
    if settings.auto_create_schema:
        await database.create_all()
        logger.info("Database schema created")

    upload_dir = Path(settings.file_upload_path)
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", upload_dir.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    rid = current_request_id(request)
    content = {"success": False, "error": error, "message": message, "request_id": rid}
    if details:
        content["details"] = details
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={REQUEST_ID_HEADER: rid} if rid else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the error envelope.

        ValidationError / RequestValidationError → 400
        AuthenticationError                      → 401
        AuthorizationError                       → 403
        NotFoundError                            → 404
        DatabaseError / FileStorageError         → 500
        LittleAppError (base)                    → 500
        Exception (fallback)                     → 500

    5xx responses never include internal details; those are logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", current_request_id(request), exc.message)
        return _error_response(request, 400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
            for e in exc.errors()
        ]
        message = errors[0]["msg"] if errors else "Validation failed"
        return _error_response(request, 400, "validation_error", message, {"errors": errors})

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(request, 401, "not_authenticated", exc.message)

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        logger.warning("[%s] Forbidden: %s", current_request_id(request), exc.message)
        return _error_response(request, 403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(request, 404, "not_found", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            current_request_id(request), exc.message, exc.context,
        )
        return _error_response(
            request, 500, "server_error",
            "An internal error occurred. Please try again later.",
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            current_request_id(request), exc.message, exc.context,
        )
        return _error_response(request, 500, "server_error", exc.message)

    @app.exception_handler(LittleAppError)
    async def handle_app_error(request: Request, exc: LittleAppError):
        logger.error("[%s] %s: %s", current_request_id(request), type(exc).__name__, exc.message)
        return _error_response(request, 500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            current_request_id(request),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            request, 500, "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application around `settings` (read from the environment
    when omitted).
    """
    settings = settings or Settings()
    setup_logging(settings)

    app = FastAPI(
        title="Little Application API",
        description=(
            "Posts, courses, reviews and users with a shared list pipeline: "
            "field filters with "
            "gt/gte/lt/lte/in operators, select, sort, and page/limit pagination."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings)

    # Last added runs first: RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window=settings.rate_limit_window,
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(posts.router)
    app.include_router(courses.router)
    app.include_router(reviews.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: build Settings from the environment and serve."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
