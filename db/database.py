"""
db/database.py

Responsibility: Owns the SQLite engine behind the managed-record table and
hands out one Session per request.
Does NOT: define ManagedRecord, query it, or talk to ClouDNS.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Generator

from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

# Overridable so tests and containers can relocate the managed-record store
_DB_PATH = os.getenv("DB_PATH", "config/cloudns.db")

# Route handlers run in a thread pool; SQLite must accept cross-thread use
engine = create_engine(
    f"sqlite:///{_DB_PATH}",
    connect_args={"check_same_thread": False},
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_db() -> None:
    """
    Ensures the managed-record table exists, creating its directory first.

    Run by the app lifespan before the first request is served.
    """
    store_dir = os.path.dirname(_DB_PATH)
    if store_dir:
        os.makedirs(store_dir, exist_ok=True)

    SQLModel.metadata.create_all(engine)
    logger.info("Managed-record store ready at %s", _DB_PATH)


def get_session() -> Generator[Session, None, None]:
    """
    Yields a Session for one request; used via Depends in dependencies.py.
    """
    with Session(engine) as session:
        yield session
