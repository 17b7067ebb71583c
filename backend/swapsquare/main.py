"""SwapSquare API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SwapSquareError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Store, identity provider and Marketplace built on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py to keep this module's imports small
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from swapsquare.api.dependencies import init_marketplace
from swapsquare.api.error_handlers import register_error_handlers
from swapsquare.api.routes import auth, badges, conversations, health, items, swaps
from swapsquare.config import get_settings
from swapsquare.infrastructure.collection_store import SqlCollectionStore
from swapsquare.infrastructure.database import init_db
from swapsquare.infrastructure.identity_provider import LocalIdentityProvider
from swapsquare.infrastructure.observability import setup_logging
from swapsquare.services.marketplace import Marketplace

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    store = SqlCollectionStore(
        manager,
        max_retries=settings.store_max_retries,
        base_delay_ms=settings.store_base_delay_ms,
        max_delay_ms=settings.store_max_delay_ms,
    )
    if manager.is_sqlite:
        await manager.create_schema()
    market = init_marketplace(
        Marketplace(store, LocalIdentityProvider(), settings),
    )
    logger.info("SwapSquare API started")
    yield
    logger.info("SwapSquare API shutting down")
    market.close()
    await manager.dispose()


app = FastAPI(
    title="SwapSquare API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(items.router)
app.include_router(swaps.router)
app.include_router(conversations.router)
app.include_router(badges.router)

register_error_handlers(app)

# Static files: serves the frontend build in production
# mounted AFTER API routes so /api/v1/* takes precedence
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
