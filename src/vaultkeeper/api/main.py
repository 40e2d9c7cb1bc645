# VaultKeeper API - Application factory and server entry
#
# Startup: settings -> PostgreSQL pool -> repositories -> services, stored
# on app.state.vault. Routes reach the services through get_vault.
# Shutdown: audit SYSTEM_STOP, close the pool.

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings
from ..core.audit_log import EventSeverity, EventType, get_audit_logger
from ..db import RepositoryFactory, create_database, initialize_schema
from ..vault.services import VaultServices, build_services
from .binary_routes import router as binary_router
from .card_routes import router as card_router
from .logopass_routes import router as logopass_router
from .note_routes import router as note_router
from .user_routes import router as user_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and wire services, unless services were injected."""
    settings: Settings = app.state.settings
    audit = get_audit_logger(settings.audit_dir)
    db = None

    if app.state.vault is None:
        db = await create_database(settings)
        if app.state.init_schema:
            await initialize_schema(db)
        app.state.vault = build_services(RepositoryFactory(db), settings, audit)

    audit.log_event(
        event_type=EventType.SYSTEM_START,
        severity=EventSeverity.INFO,
        message="VaultKeeper API server starting",
        details={"version": __version__},
    )
    try:
        yield
    finally:
        audit.log_event(
            event_type=EventType.SYSTEM_STOP,
            severity=EventSeverity.INFO,
            message="VaultKeeper API server shutting down",
        )
        if db is not None:
            await db.close()
            app.state.vault = None


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[VaultServices] = None,
    init_schema: bool = False,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (default: read from the environment)
        services: Pre-built services; skips database setup when given
        init_schema: Run schema.sql on startup
    """
    settings = settings or Settings.from_env()
    logging.getLogger("vaultkeeper").setLevel(settings.log_level)

    app = FastAPI(
        title="VaultKeeper API",
        description="Personal encrypted storage for cards, credentials, notes and files",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.vault = services
    app.state.init_schema = init_schema

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(user_router)
    app.include_router(card_router)
    app.include_router(logopass_router)
    app.include_router(note_router)
    app.include_router(binary_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def start_api_server(settings: Settings, init_schema: bool = False):
    """
    Start the FastAPI server.

    Args:
        settings: Configuration; host and port are taken from it
        init_schema: Create tables before serving
    """
    app = create_app(settings, init_schema=init_schema)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
