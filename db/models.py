"""
db/models.py

Responsibility: Defines all SQLModel table models used by the application.
Does NOT: contain business logic, repositories, or session management.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint

# ---------------------------------------------------------------------------
# ManagedRecord: caller-side view of every record the service manages
# ---------------------------------------------------------------------------


class ManagedRecord(SQLModel, table=True):
    """
    Stores the ClouDNS id and last confirmed attributes of a managed record.

    One row per (zone, record_id). The row is the "persisted identifier" of
    the record: it is dropped when a read finds the record gone remotely.

    Collaborators:
        - ManagedRecordRepository: reads and writes these rows
        - record_routes: updates them after each reconciliation
    """

    __table_args__ = (UniqueConstraint("zone", "record_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)

    # ClouDNS-assigned record id
    record_id: str = Field(index=True)

    # Zone the record lives in, e.g. "example.com"
    zone: str = Field(index=True)

    host: str = Field(default="")
    type: str
    value: str
    ttl: int

    # Type-specific fields; NULL when the type does not use them
    priority: Optional[int] = Field(default=None)
    weight: Optional[int] = Field(default=None)
    port: Optional[int] = Field(default=None)

    # Lifecycle state as last observed ("confirmed", "stale", ...)
    state: str = Field(default="confirmed")

    # Always timezone-aware UTC
    last_synced: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
