"""
FastAPI main application
Guessmon - creature trivia quiz service

Modular architecture with separated API routers in guessmon/api/:
- health.py: Health check
- catalog.py: Cohorts, creatures and sync status
- config.py: Difficulty presets and round options
- sessions.py: Quiz session lifecycle (start, guess, hint, advance, quit)

Routers read the catalog store, sync status and session registry from
app.state; nothing lives in module globals.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager, suppress
from typing import Optional
import asyncio
import logging

import httpx

from guessmon import __version__
from guessmon.config import Settings, load_settings
from guessmon.core.catalog import CatalogStore
from guessmon.core.sync import SyncEngine
from guessmon.services.catalog_sync import SyncStatus, run_startup_sync
from guessmon.services.session_registry import SessionRegistry

# Import all API routers
from guessmon.api import health, catalog, sessions
from guessmon.api import config as config_router


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    settings: Settings = app.state.settings

    # Startup: bundled catalog first, so the service works offline
    try:
        app.state.catalog = CatalogStore.from_bundled()
        logger.info(f"✅ Server started with {len(app.state.catalog)} bundled creatures")
    except Exception as e:
        logger.error(f"❌ Failed to load bundled catalog: {e}")
        raise

    app.state.sync_status = SyncStatus()
    app.state.sessions = SessionRegistry(
        tick_interval=settings.tick_interval,
        idle_timeout=settings.session_idle_timeout,
    )

    sync_task = None
    if settings.sync.enabled:
        engine = SyncEngine(app.state.catalog, settings.sync, transport=app.state.sync_transport)
        sync_task = asyncio.create_task(
            run_startup_sync(app.state.catalog, engine, app.state.sync_status)
        )
        app.state.sync_task = sync_task

    yield

    # Shutdown: an unfinished sync is abandoned without merging
    if sync_task is not None and not sync_task.done():
        sync_task.cancel()
        with suppress(asyncio.CancelledError):
            await sync_task
    cleared = app.state.sessions.clear()
    logger.info(f"🛑 Server shutting down ({cleared} sessions discarded)")


def create_app(
    settings: Optional[Settings] = None,
    sync_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application

    Args:
        settings: Service settings (default: load_settings())
        sync_transport: Optional httpx transport for the catalog sync
    """
    application = FastAPI(
        title="Guessmon - Creature Quiz",
        description="Timed guess-the-creature quiz over a synced catalog",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.settings = settings or load_settings()
    application.state.sync_transport = sync_transport
    application.state.sync_task = None

    # CORS middleware (allow all origins for development)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================== INCLUDE ROUTERS ====================

    # Health check (GET /)
    application.include_router(health.router)

    # Catalog endpoints (GET /catalog/cohorts, /catalog/creatures, /catalog/sync)
    application.include_router(catalog.router)

    # Config endpoint (GET /config)
    application.include_router(config_router.router)

    # Session endpoints (POST /sessions, /sessions/{id}/guess, ...)
    application.include_router(sessions.router)

    return application


app = create_app()


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
