"""
tests/conftest.py

Shared pytest fixtures used by both unit and integration test suites.
All DB fixtures use in-memory SQLite (StaticPool), all HTTP fixtures use
respx.mock, and time is driven by a fake clock, with no real network calls and
no real sleeping in any test that involves the confirmation window.
"""

from __future__ import annotations

import os

import pytest
import respx
from sqlmodel import SQLModel, Session, create_engine
from sqlmodel.pool import StaticPool

# NOTE: Models must be imported before SQLModel.metadata.create_all so that
# all table definitions are registered in the metadata before we call create_all.
import db.models  # noqa: F401  side-effect import to register table metadata
from cloudns.dns_provider import WireRecord
from exceptions import DnsProviderError

# ---------------------------------------------------------------------------
# Redirect the DB to /tmp for all test runs, never write to config/cloudns.db
# ---------------------------------------------------------------------------

os.environ.setdefault("DB_PATH", "/tmp/cloudns_test.db")


# ---------------------------------------------------------------------------
# Database fixture: in-memory SQLite, isolated per test
# ---------------------------------------------------------------------------


@pytest.fixture(name="db_session")
def db_session_fixture():
    """
    Yields a fresh in-memory SQLite session for each test.

    Tables are created before the test and dropped after, ensuring full
    isolation between tests.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


# ---------------------------------------------------------------------------
# HTTP mock fixture: intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Fake clock: monotonic time that only moves when something sleeps
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock plus a matching async sleep that advances it."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Fake provider: in-memory ClouDNS zones
# ---------------------------------------------------------------------------


class FakeProvider:
    """
    In-memory DNSProvider with knobs for eventual consistency and failures.

    Attributes:
        zones: zone name → list of WireRecords (listing order).
        hidden_polls: number of listings a newly created record is left out of.
        never_list: newly created records never show up in listings.
        ignore_destroy: destroy_record reports success but keeps the record.
        fail: operation name ("list", "create", "update", "destroy") → error to raise.
        calls: every call made, in order, as (operation, argument) tuples.
    """

    def __init__(self) -> None:
        self.zones: dict[str, list[WireRecord]] = {}
        self.hidden_polls = 0
        self.never_list = False
        self.ignore_destroy = False
        self.fail: dict[str, Exception] = {}
        self.calls: list[tuple[str, object]] = []
        self._next_id = 42
        self._hidden: dict[str, int] = {}

    def add(self, zone: str, **fields) -> WireRecord:
        record = {"domain-name": zone, "host": "", "ttl": 3600, **fields}
        self.zones.setdefault(zone, []).append(record)
        return record

    async def list_records(self, zone: str) -> list[WireRecord]:
        self.calls.append(("list", zone))
        self._maybe_fail("list")
        listing = []
        for record in self.zones.get(zone, []):
            record_id = record["record-id"]
            if self.never_list and record_id in self._hidden:
                continue
            if self._hidden.get(record_id, 0) > 0:
                self._hidden[record_id] -= 1
                continue
            listing.append(dict(record))
        return listing

    async def create_record(self, record: WireRecord) -> WireRecord:
        self.calls.append(("create", dict(record)))
        self._maybe_fail("create")
        created = {**record, "record-id": str(self._next_id)}
        self._next_id += 1
        self._hidden[created["record-id"]] = self.hidden_polls
        self.zones.setdefault(record["domain-name"], []).append(created)
        return dict(created)

    async def update_record(self, record: WireRecord) -> WireRecord:
        self.calls.append(("update", dict(record)))
        self._maybe_fail("update")
        zone = self.zones.get(record["domain-name"], [])
        for i, existing in enumerate(zone):
            if existing["record-id"] == record["record-id"]:
                # mod-record.json cannot change the type
                zone[i] = {**record, "record-type": existing["record-type"]}
                return dict(record)
        raise DnsProviderError(f"Invalid record-id {record['record-id']}")

    async def destroy_record(self, zone: str, record_id: str) -> None:
        self.calls.append(("destroy", record_id))
        self._maybe_fail("destroy")
        if self.ignore_destroy:
            return
        self.zones[zone] = [r for r in self.zones.get(zone, []) if r["record-id"] != record_id]

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail:
            raise self.fail[operation]


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider()
