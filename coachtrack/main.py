"""CoachTrack API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map CoachTrackError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py, which alone owns the
      error-kind → status mapping
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coachtrack.api.error_handlers import register_error_handlers
from coachtrack.api.routes import (
    assignments, health, images, profiles, reports, trends,
)
from coachtrack.config import get_settings
from coachtrack.infrastructure import database
from coachtrack.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("CoachTrack API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("CoachTrack API shutting down")


app = FastAPI(
    title="CoachTrack API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(profiles.router)
app.include_router(assignments.router)
app.include_router(reports.router)
app.include_router(images.router)
app.include_router(trends.router)

register_error_handlers(app)
