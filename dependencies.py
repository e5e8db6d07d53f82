"""
dependencies.py

Responsibility: Declares all FastAPI Depends() provider functions for
the reconciler and repositories used throughout the application.
Does NOT: contain business logic, HTTP handlers, or DB schema definitions.
"""

from __future__ import annotations

import logging

import httpx
from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from config import load_settings
from db.database import get_session
from exceptions import ConfigurationError
from repositories.managed_record_repository import ManagedRecordRepository
from services.reconciler import Reconciler

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Infrastructure: shared app-level resources
# ---------------------------------------------------------------------------


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Returns the shared httpx.AsyncClient stored on app.state.

    The client is created once during the FastAPI lifespan and reused for
    all requests to avoid connection-pool overhead.

    Args:
        request: The current FastAPI Request (injected automatically).

    Returns:
        The application-level httpx.AsyncClient.
    """
    return request.app.state.http_client


def get_reconciler(
    request: Request,
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Reconciler:
    """
    Returns the application-wide Reconciler, building it on first use.

    A single instance is kept on app.state so that every request shares one
    rate limiter and the configured ceiling holds across concurrent requests.

    Args:
        request: The current FastAPI Request (injected automatically).
        http_client: The shared HTTP client.

    Returns:
        The Reconciler.

    Raises:
        HTTPException: 503 if the ClouDNS credentials are not configured correctly.
    """
    reconciler = getattr(request.app.state, "reconciler", None)
    if reconciler is None:
        try:
            settings = load_settings()
        except ConfigurationError as exc:
            logger.error("ClouDNS is not configured: %s", exc)
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        reconciler = Reconciler.from_settings(settings, http_client)
        request.app.state.reconciler = reconciler
    return reconciler


# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------


def get_managed_record_repo(session: Session = Depends(get_session)) -> ManagedRecordRepository:
    """
    Provides a ManagedRecordRepository for the current request's DB session.

    Args:
        session: The DB session injected by get_session.

    Returns:
        A ManagedRecordRepository instance.
    """
    return ManagedRecordRepository(session)
