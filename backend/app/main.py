"""
Coleta Backend — FastAPI Application Factory
===============================================

What:  create_app() wires persistence, middleware, error handlers and routers.
Who:   uvicorn imports the module-level `app` (uvicorn app.main:app); tests
       call create_app(engine=...) with their own in-memory engine.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌─────────┐ ┌────────┐ ┌────────┐          │
    │  │  Req ID  │→│ Logging │→│  GZip  │→│  CORS  │          │
    │  └──────────┘ └─────────┘ └────────┘ └────────┘          │
    │                                                          │
    │  Routes:                                                 │
    │  /auth  /materials  /weighings  /leaderboard  /health    │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Precondition→400 │ Auth→401 │          │
    │  NotFound→404   │ Database→500     │ Other→500           │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    create_app():  builds the database engine (or takes the injected one)
                   and stores engine + session factory on app.state
    Startup:       logging, configuration check
    Shutdown:      dispose the engine
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
from sqlalchemy.ext.asyncio import AsyncEngine

from app import __version__
from app.config import settings
from app.database import build_engine, build_session_factory
from app.exceptions import (
    AuthenticationError,
    ColetaError,
    DatabaseError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import auth, health, leaderboard, materials, weighings

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup.
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
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.log_level == "DEBUG" else logging.WARNING
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging + configuration check. Shutdown: dispose the engine."""
    setup_logging()
    logger.info("Coleta Backend %s starting up (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Coleta Backend shutting down...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all Exception handler runs outside RequestIDMiddleware, after
    # the ContextVar has been reset; request.state keeps the id.
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_body(request: Request, error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": _request_id(request)}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error envelope.

    Handler hierarchy:
        RequestValidationError  → 400 (malformed body, e.g. weightGrams <= 0)
        ValidationError         → 400
        PreconditionError       → 400 (worker without cooperative)
        AuthenticationError     → 401
        NotFoundError           → 404
        DatabaseError           → 500 (generic message, details logged)
        Exception (fallback)    → 500
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Schema-level failures; reported as 400 with one entry per field."""
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        message = details[0]["message"] if details else "Dados inválidos."
        # Pydantic prefixes messages raised from validators with "Value error, "
        message = message.removeprefix("Value error, ")
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), details)
        return JSONResponse(
            status_code=400,
            content=_error_body(request, "validation_error", message, details),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body(request, "validation_error", exc.message, exc.context),
        )

    @app.exception_handler(PreconditionError)
    async def handle_precondition_error(request: Request, exc: PreconditionError):
        logger.warning("[%s] Precondition failed: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body(request, "precondition_failed", exc.message),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body(request, "unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body(request, "not_found", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the client; context stays in the server log."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "server_error", exc.message),
        )

    @app.exception_handler(ColetaError)
    async def handle_app_error(request: Request, exc: ColetaError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace is logged server-side only."""
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request,
                "internal_server_error",
                "Ocorreu um erro inesperado. Tente novamente.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(engine: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        engine: database engine to use. When omitted, one is built from
            settings.database_url. Tests pass an in-memory SQLite engine.

    Returns:
        Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Coleta API",
        description=(
            "Backend for the recycling-cooperative weighing app: login, material "
            "catalog, weighing history and the cooperative leaderboard."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Persistence ───────────────────────────────────────────────────────
    # One engine per application instance, shared by all requests.
    app.state.engine = engine if engine is not None else build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    # ── Register Middleware ───────────────────────────────────────────────
    # Execution order is the reverse of addition: RequestID → Logging → GZip → CORS
    origins = settings.cors_origins_list
    allow_any = "*" in origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if allow_any else origins,
        allow_origin_regex=".*" if allow_any else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(materials.router)
    app.include_router(weighings.router)
    app.include_router(leaderboard.router)
    app.include_router(health.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
