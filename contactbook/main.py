"""
ContactBook Backend: FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires settings, the document store, middleware,
       exception handlers and routers, in that order.
Who:   uvicorn (`uvicorn contactbook.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: RequestID → Logging → Timeout → GZip   │
    │                                                     │
    │  Routes (first match wins):                         │
    │   /health → /api/contacts… → /partials/{name} → /*  │
    │                                                     │
    │  Exception Handlers:                                │
    │   Validation→400  NotFound→404  Store→500/503       │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, open the document store (with retry)
    Shutdown: close the document store (dispose the pool)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from contactbook import __version__
from contactbook.config import Settings, settings as default_settings
from contactbook.exceptions import (
    ContactBookError,
    DatabaseError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from contactbook.middleware.logging import RequestLoggingMiddleware
from contactbook.middleware.request_id import request_id_var, RequestIDMiddleware
from contactbook.middleware.timeout import RequestTimeoutMiddleware
from contactbook.routes import ROUTERS
from contactbook.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] contactbook.access: GET /api/contacts 200 3.1ms
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-statement and per-request chatter from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the document store on startup and close it on shutdown.

    An unreachable store does not stop the server: /health reports
    `unhealthy` and API calls answer 503 until the database comes back.
    """
    app_settings: Settings = app.state.settings
    store: DocumentStore = app.state.store

    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("ContactBook %s starting up...", __version__)

    try:
        await store.open()
    except StoreUnavailableError as e:
        logger.error("Document store not available at startup: %s", e.message)

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("ContactBook shutting down...")
    await store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the ErrorResponse body.

    Handler hierarchy:
        ValidationError        → 400 Bad Request
        NotFoundError          → 404 Not Found
        StoreUnavailableError  → 503 Service Unavailable
        DatabaseError          → 500 Internal Server Error
        ContactBookError       → 500 Internal Server Error
        Exception (fallback)   → 500 Internal Server Error

    Other unhandled exceptions raised under the middleware stack are answered
    by RequestIDMiddleware so the 500 keeps its X-Request-ID; the Exception
    handler here only sees failures outside that middleware.

    Store and unexpected errors never expose their context in the response;
    it is logged server-side instead.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        logger.error("[%s] Store unavailable: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=503,
            content=_error_body("store_unavailable", exc.message),
            headers={"Retry-After": "5"},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(ContactBookError)
    async def handle_contactbook_error(request: Request, exc: ContactBookError):
        logger.error("[%s] Unhandled application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def mount_routers(app: FastAPI, routers: Iterable[APIRouter]) -> None:
    """
    Include routers in the given order.

    Starlette matches routes in registration order and the first match wins,
    so a catch-all router shadows everything mounted after it.
    """
    for router in routers:
        app.include_router(router)
        logger.debug("Mounted router with %d routes", len(router.routes))


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    routers: Iterable[APIRouter] = ROUTERS,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; the process-wide `settings` when omitted.
        store:    Document store to serve from; built from `settings` when
                  omitted. The lifespan opens and closes it.
        routers:  Routers in mount order. Tests pass a reordered tuple to
                  show that the catch-all must come last.
    """
    app_settings = settings or default_settings

    app = FastAPI(
        title="ContactBook API",
        description=(
            "Contacts REST resource over a document store, plus the partial "
            "template and application shell routes of the ContactBook client."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.store = store or DocumentStore(app_settings)

    # Executes in reverse order of addition:
    # RequestID → Logging → Timeout → GZip → CORS → router
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestTimeoutMiddleware, timeout=app_settings.request_timeout)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)
    mount_routers(app, routers)

    return app


# uvicorn expects `contactbook.main:app` to be importable
app = create_app()
