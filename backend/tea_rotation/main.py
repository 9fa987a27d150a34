"""Tea Rotation API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TeaRotationError → structured JSON responses
    - CORS configured from settings (permissive by default); unexpected 500s and
      preflight answers come from api/middleware.py
    - Database manager created once on startup and disposed on shutdown (lifespan)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tea_rotation.api.error_handlers import register_error_handlers
from tea_rotation.api.middleware import PreflightCORSMiddleware, UnhandledErrorMiddleware
from tea_rotation.infrastructure.database import init_db, close_db
from tea_rotation.infrastructure.observability import setup_logging
from tea_rotation.config import get_settings
from tea_rotation.api.routes import (
    health, users, session_lifecycle, orders, summarize,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Tea Rotation API started")
    yield
    await close_db()
    logger.info("Tea Rotation API shutting down")


app = FastAPI(
    title="Tea Rotation API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
# added first, so it runs inside the CORS layer
app.add_middleware(UnhandledErrorMiddleware)
app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(session_lifecycle.router)
app.include_router(orders.router)
app.include_router(summarize.router)

register_error_handlers(app)
