"""
Resource Catalog — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers; the
       lifespan builds, connects and finally closes the EntityStore.
Who:   uvicorn (`catalog.main:app`), `python -m catalog`, and the tests,
       which call create_app(store=...) with their own store.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌────────┐   │
    │  │  Req ID  │→│   Logging   │→│ GZip │→│  CORS  │   │
    │  └──────────┘ └─────────────┘ └──────┘ └────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────┐ ┌─────────────┐ ┌─────────┐   │
    │  │ /resources/...   │ │ GET /health │ │ GET /   │   │
    │  └──────────────────┘ └─────────────┘ └─────────┘   │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Store→500    │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Build the store from settings (unless one was injected)
    3. Connect it (the SQL store retries while the database comes up)
    4. Attach the CatalogService to app.state

    Shutdown:
    1. Close the store (dispose the connection pool)
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

from catalog import __version__
from catalog.config import Settings, settings
from catalog.exceptions import CatalogError, NotFoundError, StoreError, ValidationError
from catalog.middleware import RequestIDMiddleware, RequestLoggingMiddleware, request_id_var
from catalog.routes import health, resources
from catalog.services import CatalogService
from catalog.store import EntityStore, create_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(cfg: Settings = settings) -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2024-01-15T12:00:00 [INFO] catalog.access: GET /resources 200 3.1ms [1f2e3d4c] from 127.0.0.1
    """
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def attach_store(app: FastAPI, store: EntityStore, cfg: Settings) -> None:
    app.state.store = store
    app.state.catalog_service = CatalogService(
        store,
        precision=cfg.rating_precision,
        default_user_id=cfg.default_user_id,
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    cfg: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(cfg)
    logger.info("=" * 60)
    logger.info("Resource Catalog starting up...")

    store: Optional[EntityStore] = getattr(app.state, "store", None)
    if store is None:
        store = create_store(cfg)
        attach_store(app, store, cfg)

    # A StoreError here aborts startup; uvicorn reports it and exits
    await store.connect()
    logger.info("Store backend: %s", store.name)
    logger.info("Server ready at http://%s:%d", cfg.backend_host, cfg.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Resource Catalog shutting down...")
    await store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one error body format.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        RequestValidationError  → 400 Bad Request (malformed body or params)
        NotFoundError           → 404 Not Found
        StoreError              → 500 (generic message, context logged)
        CatalogError (base)     → 500
        Exception (fallback)    → 500 (stack trace logged)

    Server-side details (driver errors, file paths, SQL) are logged and
    never returned in a response body.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        problems = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request payload: %s", rid, problems)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Request payload is invalid", {"errors": problems}),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        rid = request_id_var.get("")
        logger.error("[%s] Store error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(request: Request, exc: CatalogError):
        rid = request_id_var.get("")
        logger.error("[%s] Catalog error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
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

def create_app(cfg: Optional[Settings] = None, store: Optional[EntityStore] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        cfg:   Settings to use (defaults to the process-wide `settings`).
        store: An already built store. When given, the lifespan connects and
               closes it instead of building one from `cfg.store_backend`.
    """
    cfg = cfg or settings

    app = FastAPI(
        title="Resource Catalog API",
        description=(
            "Catalog of learning resources. Resources carry 1-5 star ratings and "
            "free-text feedback; reads are enriched with the average rating."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    if store is not None:
        attach_store(app, store, cfg)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(resources.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn imports `catalog.main:app`; building it has no I/O side effects
app = create_app()
