"""
Cart API — FastAPI Application Factory
=======================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn cartapi.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Routes (Basic auth, /{db_type}/...):               │
    │  ┌──────────┐ ┌──────────┐ ┌────────┐ ┌──────────┐  │
    │  │ cart     │ │ product  │ │ user   │ │ /health  │  │
    │  └──────────┘ └──────────┘ └────────┘ └──────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ NotFound→404 │ Incomplete→422 │ Store→502/503 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration, log backends
    Shutdown: dispose every store (closes the Redis connection pool)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cartapi import __version__
from cartapi.config import Settings, settings
from cartapi.exceptions import (
    CartApiError,
    StoreBackendError,
    StoreUnavailableError,
    ValidationError,
    WriteConflictError,
)
from cartapi.middleware.logging import RequestLoggingMiddleware
from cartapi.middleware.request_id import RequestIDMiddleware, request_id_var
from cartapi.routes import carts, health, products, users
from cartapi.store import StoreRegistry

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Cart API %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: development setups run on the defaults
        logger.warning("Configuration warning: %s", str(e))

    logger.info("Document stores: %s", ", ".join(name for name, _ in app.state.stores))
    logger.info(
        "Error status mode: %s",
        "uniform 400" if app_settings.uniform_error_status else "per error kind",
    )
    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Cart API shutting down...")
    await app.state.stores.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _status_for(request: Request, exc: CartApiError) -> int:
    if request.app.state.settings.uniform_error_status:
        return 400
    return exc.status_code


def _error_response(request: Request, exc: CartApiError, level: int, headers=None) -> JSONResponse:
    rid = request_id_var.get("")
    status = _status_for(request, exc)
    if headers and status != exc.status_code:
        # Retry hints only make sense on the status they were written for
        headers = None
    logger.log(level, "[%s] %d: %s | Context: %s", rid, status, exc.message, exc.context)
    return JSONResponse(
        status_code=status,
        content={"error": exc.message, "code": exc.code, "request_id": rid},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

    Handler hierarchy:
        StoreUnavailableError → 503 + Retry-After, logged at ERROR
        StoreBackendError     → 502, logged at ERROR
        WriteConflictError    → 409, logged at WARNING
        RequestValidationError → 400 (malformed body, e.g. negative quantity)
        CartApiError (base)   → the exception's own status (400/404/422)
        Exception (fallback)  → 500, stack trace logged, generic message

    With uniform_error_status every CartApiError is answered with 400 and
    no Retry-After header is sent.
    """

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        return _error_response(request, exc, logging.ERROR, headers={"Retry-After": "5"})

    @app.exception_handler(StoreBackendError)
    async def handle_store_backend_error(request: Request, exc: StoreBackendError):
        return _error_response(request, exc, logging.ERROR)

    @app.exception_handler(WriteConflictError)
    async def handle_write_conflict(request: Request, exc: WriteConflictError):
        return _error_response(request, exc, logging.WARNING)

    @app.exception_handler(CartApiError)
    async def handle_app_error(request: Request, exc: CartApiError):
        return _error_response(request, exc, logging.WARNING)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        error = ValidationError(
            message=first.get("msg", "Invalid request body"),
            field=field or None,
            context={"errors": len(errors)},
        )
        return _error_response(request, error, logging.WARNING)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] 500: Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "An unexpected error occurred. Please try again or contact support.",
                "code": "internal_server_error",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    stores: Optional[StoreRegistry] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Defaults to the module-level `settings` singleton.
        stores: Pre-built store registry (tests); built from settings otherwise.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Cart API",
        description=(
            "CRUD over JSON documents for carts, products and users, with "
            "merge-by-sku cart updates and batched partial updates."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    # Built here rather than in the lifespan so the app is usable by test
    # transports that never send lifespan events; connections open lazily.
    app.state.settings = app_settings
    app.state.stores = stores if stores is not None else StoreRegistry.from_settings(app_settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(carts.router)
    app.include_router(products.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


app = create_app()
