"""
routes/record_routes.py

Responsibility: JSON endpoints that let an external orchestrator create, read,
update, delete and import ClouDNS records, keeping the managed-record table in
step with what the provider reports.
Does NOT: call the ClouDNS API directly, match records, or retry.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Field, SQLModel

from cloudns.dns_provider import DnsRecord, RecordType
from dependencies import get_managed_record_repo, get_reconciler
from exceptions import (
    ConfirmationCancelled,
    ConfirmationTimeout,
    DeleteNotObserved,
    ImportRecordNotFound,
    MalformedIdentifier,
    MissingRequiredField,
    ReconcileError,
    RecordTypeChange,
)
from db.models import ManagedRecord
from repositories.managed_record_repository import ManagedRecordRepository
from services.reconciler import Reconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records")


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------


class RecordBody(SQLModel):
    """Attributes of a record that may change in place."""

    host: str = ""
    type: RecordType
    value: str
    ttl: int = Field(ge=1)
    priority: Optional[int] = Field(default=None, ge=0, le=65535)
    weight: Optional[int] = Field(default=None, ge=0, le=65535)
    port: Optional[int] = Field(default=None, ge=0, le=65535)

    def to_record(self, zone: str, record_id: str = "") -> DnsRecord:
        return DnsRecord(
            zone=zone,
            host=self.host,
            type=self.type,
            value=self.value,
            ttl=self.ttl,
            id=record_id,
            priority=self.priority,
            weight=self.weight,
            port=self.port,
        )


class RecordCreate(RecordBody):
    zone: str = Field(min_length=1)


class ImportRequest(SQLModel):
    identifier: str


class RecordOut(SQLModel):
    id: str
    zone: str
    host: str
    type: RecordType
    value: str
    ttl: int
    priority: Optional[int] = None
    weight: Optional[int] = None
    port: Optional[int] = None

    @classmethod
    def from_record(cls, record: DnsRecord) -> RecordOut:
        return cls(
            id=record.id,
            zone=record.zone,
            host=record.host,
            type=record.type,
            value=record.value,
            ttl=record.ttl,
            priority=record.priority,
            weight=record.weight,
            port=record.port,
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=list[ManagedRecord])
async def list_managed_records(
    repo: ManagedRecordRepository = Depends(get_managed_record_repo),
) -> list[ManagedRecord]:
    """
    Returns every record currently tracked in the managed-record table.

    Args:
        repo: Reads the managed-record table.

    Returns:
        The stored rows; no provider call is made.
    """
    return repo.list_all()


@router.post("", response_model=RecordOut, status_code=201)
async def create_record(
    body: RecordCreate,
    reconciler: Reconciler = Depends(get_reconciler),
    repo: ManagedRecordRepository = Depends(get_managed_record_repo),
) -> RecordOut:
    """
    Creates a record and returns it once it is visible in the zone listing.

    If confirmation times out or is cancelled the record is kept as
    "pending" so that a later read or delete can settle it.

    Args:
        body: The desired record.
        reconciler: Performs the provider calls.
        repo: Persists the outcome.

    Returns:
        The confirmed record.
    """
    desired = body.to_record(body.zone)
    try:
        created = await reconciler.create(desired)
    except (ConfirmationTimeout, ConfirmationCancelled) as exc:
        repo.save(replace(desired, id=exc.record_id), state="pending")
        raise _http_error(exc) from exc
    except (ReconcileError, MissingRequiredField) as exc:
        raise _http_error(exc) from exc

    repo.save(created)
    return RecordOut.from_record(created)


@router.post("/import", response_model=RecordOut)
async def import_record(
    body: ImportRequest,
    reconciler: Reconciler = Depends(get_reconciler),
    repo: ManagedRecordRepository = Depends(get_managed_record_repo),
) -> RecordOut:
    """
    Starts managing a record that already exists at ClouDNS.

    Args:
        body: {"identifier": "zone/recordID"}.
        reconciler: Performs the lookup.
        repo: Persists the imported record.

    Returns:
        The imported record.
    """
    try:
        record = await reconciler.import_record(body.identifier)
    except (ReconcileError, MalformedIdentifier) as exc:
        raise _http_error(exc) from exc

    repo.save(record)
    return RecordOut.from_record(record)


@router.get("/{zone}/{record_id}", response_model=RecordOut)
async def read_record(
    zone: str,
    record_id: str,
    reconciler: Reconciler = Depends(get_reconciler),
    repo: ManagedRecordRepository = Depends(get_managed_record_repo),
) -> RecordOut:
    """
    Returns the record as currently listed at ClouDNS.

    A record that is no longer listed was deleted outside this service: it
    is dropped from the managed-record table and 404 is returned.

    Args:
        zone: The record's zone.
        record_id: The ClouDNS record id.
        reconciler: Performs the lookup.
        repo: Keeps the managed-record table in step.

    Returns:
        The current record.
    """
    try:
        record = await reconciler.read(record_id, zone)
    except ReconcileError as exc:
        raise _http_error(exc) from exc

    if record is None:
        repo.forget(zone, record_id)
        raise HTTPException(status_code=404, detail=f"Record {record_id} not found in {zone}")

    repo.save(record)
    return RecordOut.from_record(record)


@router.put("/{zone}/{record_id}", response_model=RecordOut)
async def update_record(
    zone: str,
    record_id: str,
    body: RecordBody,
    reconciler: Reconciler = Depends(get_reconciler),
    repo: ManagedRecordRepository = Depends(get_managed_record_repo),
) -> RecordOut:
    """
    Replaces a record with the given attributes.

    The type of a managed record cannot change in place; such a request is
    rejected before any provider call.

    Args:
        zone: The record's zone (immutable).
        record_id: The ClouDNS record id.
        body: The full desired attributes.
        reconciler: Performs the provider calls.
        repo: Keeps the managed-record table in step.

    Returns:
        The record as listed after the update.
    """
    stored = repo.get(zone, record_id)
    if stored is not None and stored.type != body.type.value:
        raise _http_error(RecordTypeChange(record_id, stored.type, body.type.value))

    try:
        record = await reconciler.update(body.to_record(zone, record_id))
    except (ReconcileError, MissingRequiredField) as exc:
        raise _http_error(exc) from exc

    if record is None:
        repo.forget(zone, record_id)
        raise HTTPException(status_code=404, detail=f"Record {record_id} not found in {zone}")

    if record.id != record_id:
        repo.forget(zone, record_id)
    repo.save(record)
    return RecordOut.from_record(record)


@router.delete("/{zone}/{record_id}", status_code=204)
async def delete_record(
    zone: str,
    record_id: str,
    reconciler: Reconciler = Depends(get_reconciler),
    repo: ManagedRecordRepository = Depends(get_managed_record_repo),
) -> Response:
    """
    Deletes a record and stops managing it.

    Args:
        zone: The record's zone.
        record_id: The ClouDNS record id.
        reconciler: Performs the provider calls.
        repo: Keeps the managed-record table in step.

    Returns:
        An empty 204 response.
    """
    try:
        await reconciler.delete(record_id, zone)
    except ReconcileError as exc:
        raise _http_error(exc) from exc

    repo.forget(zone, record_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _http_error(exc: Exception) -> HTTPException:
    """
    Maps a reconciliation failure to the HTTP status reported to the caller.

    Args:
        exc: The exception raised by the Reconciler.

    Returns:
        The HTTPException to raise.
    """
    if isinstance(exc, (MissingRequiredField, MalformedIdentifier, RecordTypeChange)):
        status = 422
    elif isinstance(exc, ImportRecordNotFound):
        status = 404
    elif isinstance(exc, (ConfirmationTimeout, ConfirmationCancelled, DeleteNotObserved)):
        status = 409
    else:
        # CreateFailed, ReadFailed, UpdateFailed, DeleteFailed
        status = 502

    logger.warning("%s: %s", type(exc).__name__, exc)
    return HTTPException(status_code=status, detail=str(exc))
