"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.tripguard.api.routes.health import router as health_router
from backend.tripguard.api.routes.itinerary import router as itinerary_router
from backend.tripguard.api.routes.metrics import router as metrics_router
from backend.tripguard.api.routes.places import router as places_router
from backend.tripguard.config import get_settings
from backend.tripguard.db.engine import create_tables, get_async_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the document table when a database is configured."""
    if get_settings().database_url:
        await create_tables(get_async_engine())
        logger.info("Document store: SQL")
    else:
        logger.warning("DATABASE_URL not set, using in-memory document store")
    yield


app = FastAPI(title="Tripguard API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(itinerary_router, tags=["itinerary"])
app.include_router(places_router, tags=["places"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Tripguard API", "version": "0.1.0"}
