"""
Restaurant CRM Backend - FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn restaurant_crm.main:app) and by the tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌───────┐ ┌─────────┐ ┌──────┐ ┌──────┐ ┌────────┐ │
    │  │Req ID │→│ Logging │→│ GZip │→│ CORS │→│ Access │ │
    │  └───────┘ └─────────┘ └──────┘ └──────┘ └────────┘ │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────┐ ┌──────────────┐ ┌───────────┐  │
    │  │ /api/customers │ │ /health /info│ │/db-console│  │
    │  └────────────────┘ └──────────────┘ └───────────┘  │
    │                                                     │
    │  Error Hook (every unhandled failure):              │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ classify → responder → ErrorDetails JSON     │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate production settings, log policy
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from restaurant_crm import __version__
from restaurant_crm.config import Settings, settings
from restaurant_crm.database import dispose_engine
from restaurant_crm.errors.handlers import register_exception_handlers
from restaurant_crm.middleware.authentication import AccessPolicyMiddleware
from restaurant_crm.middleware.logging import RequestLoggingMiddleware
from restaurant_crm.middleware.request_id import RequestIDMiddleware
from restaurant_crm.routes import console, customers, health
from restaurant_crm.security import CredentialStore, select_policy

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure the root logger once, at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    uvicorn's access log and the SQLAlchemy engine are turned down to
    WARNING; RequestLoggingMiddleware writes the access log instead.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Restaurant CRM Backend starting up (environment=%s)", config.environment)

    # Raises on insecure production settings; the server does not start
    config.validate_required_for_production()

    logger.info("Access policy: %s", app.state.access_policy.name)
    if config.db_console_enabled:
        logger.info("Database console enabled at /db-console/")
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Restaurant CRM Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to build the app from; defaults to the module-level
            `settings`. Tests pass their own to select the permit-all policy.

    The access policy and the credential store (including the bcrypt hash)
    are built here, once per app, and kept on app.state.
    """
    config = config or settings

    app = FastAPI(
        title="Restaurant CRM API",
        description=(
            "Customer records for a restaurant: contact details, allergies, "
            "visit counts and Michelin inspector suspicion."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.access_policy = select_policy(config)
    app.state.credentials = CredentialStore.from_settings(config)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS → AccessPolicy
    app.add_middleware(
        AccessPolicyMiddleware,
        policy=app.state.access_policy,
        credentials=app.state.credentials,
        realm=config.auth_realm,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-Total-Count",
            "Location",
            "WWW-Authenticate",
        ],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(customers.router)
    app.include_router(health.router)
    if config.db_console_enabled:
        app.include_router(console.router)

    return app


app = create_app()
