"""
repositories/managed_record_repository.py

Responsibility: Provides CRUD access for the ManagedRecord table in SQLite.
Does NOT: contain business logic, make HTTP calls, or manage sessions.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlmodel import Session, select

from cloudns.dns_provider import DnsRecord
from db.models import ManagedRecord

logger = logging.getLogger(__name__)


class ManagedRecordRepository:
    """
    Reads and writes ManagedRecord rows keyed by (zone, record_id).

    Collaborators:
        - Session: injected SQLModel session, managed externally
    """

    def __init__(self, session: Session) -> None:
        """
        Initialises the repository with the current DB session.

        Args:
            session: The SQLModel session for this request.
        """
        self._session = session

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    def get(self, zone: str, record_id: str) -> ManagedRecord | None:
        """
        Returns the row for the given record, or None if it is not managed.

        Args:
            zone: The record's zone.
            record_id: The ClouDNS record id.

        Returns:
            The ManagedRecord row or None.
        """
        return self._session.exec(
            select(ManagedRecord).where(
                ManagedRecord.zone == zone, ManagedRecord.record_id == record_id
            )
        ).first()

    def list_all(self) -> list[ManagedRecord]:
        """
        Returns every managed record ordered by zone, then host.

        Returns:
            A list of ManagedRecord rows, possibly empty.
        """
        return list(
            self._session.exec(
                select(ManagedRecord).order_by(ManagedRecord.zone, ManagedRecord.host)
            ).all()
        )

    def save(self, record: DnsRecord, state: str = "confirmed") -> ManagedRecord:
        """
        Inserts or refreshes the row for a record.

        A record whose creation could not be confirmed is saved as "pending"
        so a later read or delete can resolve it.

        Args:
            record: A record carrying its ClouDNS id.
            state: Lifecycle state to store ("confirmed" or "pending").

        Returns:
            The persisted ManagedRecord.
        """
        row = self.get(record.zone, record.id) or ManagedRecord(
            zone=record.zone, record_id=record.id, type=record.type.value, value="", ttl=0
        )
        row.host = record.host
        row.type = record.type.value
        row.value = record.value
        row.ttl = record.ttl
        row.priority = record.priority
        row.weight = record.weight
        row.port = record.port
        row.state = state
        row.last_synced = datetime.now(timezone.utc)

        self._session.add(row)
        self._session.commit()
        self._session.refresh(row)
        return row

    def forget(self, zone: str, record_id: str) -> bool:
        """
        Deletes the row for a record that no longer exists remotely.

        Args:
            zone: The record's zone.
            record_id: The ClouDNS record id.

        Returns:
            True if a row was removed, False if none existed.
        """
        row = self.get(zone, record_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.commit()
        logger.debug("Forgot managed record %s in %s", record_id, zone)
        return True
