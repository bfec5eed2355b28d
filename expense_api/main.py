"""
Expense API — FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
Why:   Keeps logging setup, middleware, exception handlers and routers in
       one place.
How:   create_app() returns a configured FastAPI instance; `app` is the
       module-level instance uvicorn serves (uvicorn expense_api.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  [Request ID] → [Logging] → [CORS]          │
    │                                                          │
    │  Routes:      GET /   GET /health                        │
    │               GET /expenses   GET /expected-balance      │
    │               GET /expense    GET /complete-expense      │
    │               POST /expense                              │
    │                                                          │
    │  Exception Handlers:                                     │
    │    NotFoundError → 404 (empty)   everything else → 500   │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from expense_api import __version__
from expense_api.config import settings
from expense_api.exceptions import (
    GENERIC_ERROR_MESSAGE,
    ExpenseApiError,
    NotFoundError,
)
from expense_api.middleware.logging import RequestLoggingMiddleware
from expense_api.middleware.request_id import RequestIDMiddleware, request_id_var
from expense_api.routes import expenses, health

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE"]
CORS_HEADERS = ["X-Requested-With", "content-type"]


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Third-party HTTP loggers are raised to WARNING: at INFO/DEBUG they log
    full request URLs, and ours carry the caller's token.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("notion_client").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Set up logging on startup; log the configuration that matters."""
    setup_logging()
    logger.info("Expense API %s starting up...", __version__)
    logger.info(
        "Databases: expenses=%r balance=%r; CORS origins: %s",
        settings.expenses_database_name,
        settings.balance_database_name,
        ", ".join(settings.cors_origins_list) or "(none)",
    )
    logger.info("Listening on http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Expense API shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the fixed responses of the HTTP contract.

    Handler hierarchy:
        NotFoundError     → 404, empty body
        ExpenseApiError   → 500 {"message": "Something went wrong"}
        Exception         → 500 {"message": "Something went wrong"}

    The exception message and context are logged, never returned.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] %s", rid, exc.message)
        return Response(status_code=404)

    @app.exception_handler(ExpenseApiError)
    async def handle_expense_api_error(request: Request, exc: ExpenseApiError):
        rid = request_id_var.get("")
        logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"message": GENERIC_ERROR_MESSAGE})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": GENERIC_ERROR_MESSAGE})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Expense API",
        description=(
            "HTTP façade over a Notion workspace: pending expenses, the expected "
            "monthly balance, and expense create/complete/archive."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(expenses.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve `app` with uvicorn on the configured port."""
    uvicorn.run(
        "expense_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
