"""Statusboard API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map StatusBoardError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statusboard import __version__
from statusboard.api.error_handlers import register_error_handlers
from statusboard.api.routes import health, projects, reactions, updates, users
from statusboard.config import get_settings
from statusboard.infrastructure import database
from statusboard.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    if database.db_manager is None:
        database.init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    logger.info("Statusboard API started")
    yield
    logger.info("Statusboard API shutting down")
    if database.db_manager is not None:
        await database.db_manager.dispose()
        database.db_manager = None


app = FastAPI(title="Statusboard API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(projects.router)
app.include_router(updates.router)
app.include_router(reactions.router)

register_error_handlers(app)
