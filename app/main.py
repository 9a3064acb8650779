"""
LinguaHub Backend — FastAPI Application Factory
=================================================

What:  Builds the FastAPI application: middleware, error handling, routers
       and the startup/shutdown lifecycle.
How:   create_app(settings) returns a configured instance; the module-level
       `app` is what `uvicorn app.main:app` serves.

    ┌─────────────────────────────────────────────────────┐
    │ Middleware (outermost first):                       │
    │   RateLimit → RequestID → Logging → GZip → CORS     │
    │                                                     │
    │ Routers:                                            │
    │   health · users · admin · catalog · packages ·     │
    │   exams · files                                     │
    │                                                     │
    │ app.state:                                          │
    │   settings · store (DocumentStore) ·                │
    │   file_service (FileService)                        │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, warn about missing admin credentials,
              build the DocumentStore and FileService unless already set
    Shutdown: dispose the DocumentStore this app built
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import DocumentStore
from app.exceptions import LinguaHubError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware, request_id_var
from app.routes import admin, catalog, exams, files, health, packages, users
from app.services.file_service import FileService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Route all application logs to stdout, each line tagged with the
    current request ID ("-" outside a request).

    Format: 2024-06-10T12:00:00 [INFO] [a1b2c3d4] app.services.user_service: message
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    A store or file service already on app.state (tests put them there) is
    used as-is and left for its owner to dispose.
    """
    app_settings: Settings = app.state.settings

    setup_logging(app_settings.log_level)
    logger.info("LinguaHub Backend %s starting", __version__)

    for problem in app_settings.configuration_warnings():
        logger.warning("Configuration: %s", problem)

    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = DocumentStore.from_settings(app_settings)
    if getattr(app.state, "file_service", None) is None:
        app.state.file_service = FileService(
            storage_root=app_settings.storage_root,
            max_file_size=app_settings.max_file_size,
        )

    # uvicorn binds the socket; these are only the configured values
    logger.info(
        "Configured host=%s port=%d, storage at %s",
        app_settings.backend_host,
        app_settings.backend_port,
        app.state.file_service.storage_root,
    )

    yield

    if owns_store:
        await app.state.store.dispose()
    logger.info("LinguaHub Backend stopped")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(error: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """The JSON shape shared by every failed request."""
    body: Dict[str, Any] = {
        "success": False,
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        body["details"] = details
    return body


def _summarize_request_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "form")),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """
    LinguaHubError subclasses map themselves to a status and code (see
    app/exceptions.py). Request-shape failures caught by FastAPI before a
    handler runs are reported as 400 validation_error, like the service's
    own validation failures.
    """

    @app.exception_handler(LinguaHubError)
    async def handle_app_error(request: Request, exc: LinguaHubError):
        if exc.status_code >= 500:
            logger.error("%s: %s | context=%s", type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("%s: %s", type(exc).__name__, exc.message)

        headers = None
        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            headers = {"Retry-After": str(retry_after)}

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, exc.public_message, exc.public_details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = _summarize_request_errors(exc)
        summary = "; ".join(
            f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors
        )
        logger.warning("Request validation failed: %s", summary)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", summary or "Invalid request", {"errors": errors}),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path, exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Args:
        app_settings: defaults to the environment-loaded Settings; tests
                      pass their own.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="LinguaHub API",
        description=(
            "Backend for the language-learning platform: accounts and profiles, "
            "admin login, course packages and bundles, exam history and FAQs."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # add_middleware prepends, so the last one added runs first
    origins = app_settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window,
    )

    register_exception_handlers(app)

    for module in (health, users, admin, catalog, packages, exams, files):
        app.include_router(module.router)

    return app


app = create_app()
