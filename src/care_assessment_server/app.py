"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the step catalog once
  - CORS middleware
  - Global exception handlers (ValueError → 404/400, KeyError → 404)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``care-assessment-server`` console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from care_assessment.catalog import StepCatalog
from care_assessment_db.engine import dispose_engine, get_engine

from care_assessment_server.config import ServerSettings, load_settings
from care_assessment_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from care_assessment_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the step catalog at startup; dispose the DB pool at shutdown."""
    settings: ServerSettings = app.state.settings

    catalog = StepCatalog(settings.catalog_path)
    catalog.load()
    app.state.catalog = catalog

    yield

    await dispose_engine()
    logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Care Assessment API Server",
        description="Stores submitted care assessments and assessment drafts",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Outside the /api/v1 prefix
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — verifies DB connectivity."""
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok"}
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": str(exc)}

    register_routes(app)

    return app


# Module-level ASGI export (for uvicorn care_assessment_server.app:app)
app = create_app()


def cli() -> None:
    """Console-script entry point: ``care-assessment-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "care_assessment_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
