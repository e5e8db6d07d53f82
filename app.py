"""
app.py

Responsibility: Builds the FastAPI application, owns the lifespan of the
shared httpx.AsyncClient and the database, and mounts the routers.
Does NOT: contain reconciliation logic or call ClouDNS directly.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from db.database import init_db
from routes.record_routes import router as record_router

logger = logging.getLogger(__name__)

# ClouDNS answers slowly on large zones; 30s matches the confirmation window.
_HTTP_TIMEOUT = httpx.Timeout(30.0)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Initialises the database and the shared HTTP client for the app's lifetime.

    Args:
        app: The FastAPI application.

    Yields:
        None while the application is serving.
    """
    init_db()
    async with httpx.AsyncClient(timeout=_HTTP_TIMEOUT) as client:
        app.state.http_client = client
        app.state.reconciler = None
        logger.info("ClouDNS reconciler started")
        yield
    logger.info("ClouDNS reconciler stopped")


app = FastAPI(title="ClouDNS record reconciler", lifespan=lifespan)
app.include_router(record_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
