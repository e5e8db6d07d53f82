"""
services/reconciler.py

Responsibility: Reconciles declared DNS records against ClouDNS (create,
read, update, delete and import) through the rate limiter, confirming newly
created records against the zone listing.
Does NOT: decide when an operation should run, diff desired vs. stored state,
or talk HTTP directly.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from enum import Enum

import httpx

from cloudns import record_codec, zone_index
from cloudns.cloudns_client import CloudnsClient
from cloudns.dns_provider import DnsRecord, DNSProvider
from cloudns.import_identifier import parse_import_id
from config import ProviderSettings
from exceptions import (
    ConfirmationCancelled,
    ConfirmationTimeout,
    CreateFailed,
    DeleteFailed,
    DeleteNotObserved,
    DnsProviderError,
    ImportRecordNotFound,
    MissingRequiredField,
    ReadFailed,
    UpdateFailed,
)
from services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Window during which a just-created record must show up in the zone listing
CONFIRM_TIMEOUT = 30.0

# Backoff between confirmation polls: 0.5s, 1s, 2s, ... capped at 10s
_POLL_INITIAL_DELAY = 0.5
_POLL_MAX_DELAY = 10.0


class RecordState(str, Enum):
    """Lifecycle of a record as seen by the caller."""

    ABSENT = "absent"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    STALE = "stale"
    DESTROYED = "destroyed"


class Reconciler:
    """
    Applies Create/Read/Update/Delete/Import for DNS records on one provider.

    Every provider call first acquires a token from the Reconciler's own
    RateLimiter. Lookups always list the whole zone and match strictly by id.

    Collaborators:
        - DNSProvider: black-box zone/record API (CloudnsClient in production)
        - RateLimiter: gate in front of every provider call
        - record_codec / zone_index: field mapping and id lookup
    """

    def __init__(
        self,
        provider: DNSProvider,
        rate_limiter: RateLimiter | None = None,
        *,
        confirm_timeout: float = CONFIRM_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialises the reconciler.

        Args:
            provider: Any DNSProvider implementation.
            rate_limiter: Limiter owned by this reconciler; a default
                5 req/s limiter is created when None.
            confirm_timeout: Seconds to wait for a created record to be listed.
            clock: Monotonic time source used for the confirmation deadline.
            sleep: Awaitable delay used between confirmation polls.
        """
        self._provider = provider
        self._limiter = rate_limiter or RateLimiter(clock=clock, sleep=sleep)
        self._confirm_timeout = confirm_timeout
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: ProviderSettings, http_client: httpx.AsyncClient) -> Reconciler:
        """
        Builds a Reconciler talking to ClouDNS with a limiter sized by settings.

        Args:
            settings: Validated credentials and request rate.
            http_client: A long-lived httpx.AsyncClient instance.

        Returns:
            A ready Reconciler.
        """
        provider = CloudnsClient(http_client, settings)
        return cls(provider, RateLimiter(settings.requests_per_second))

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def create(
        self,
        desired: DnsRecord,
        cancel_event: asyncio.Event | None = None,
    ) -> DnsRecord:
        """
        Creates a record and waits until it is visible in its zone listing.

        Args:
            desired: The record to create; its id is ignored.
            cancel_event: When set, the confirmation poll stops with
                ConfirmationCancelled.

        Returns:
            The confirmed record as listed by the provider.

        Raises:
            MissingRequiredField: If the record lacks a type-required field.
            CreateFailed: If the provider rejects the create call.
            ReadFailed: If a confirmation listing fails.
            ConfirmationTimeout: If the record is not listed within the window.
            ConfirmationCancelled: If cancel_event is set mid-poll.
        """
        wire = record_codec.encode(replace(desired, id=""))

        logger.debug(
            "CREATE %s %d in %s %s", desired.fqdn, desired.ttl, desired.type.value, desired.value
        )
        await self._limiter.acquire()
        try:
            created = await self._provider.create_record(wire)
        except DnsProviderError as exc:
            raise CreateFailed(f"Could not create {desired.fqdn}: {exc}") from exc

        pending = replace(desired, id=str(created[record_codec.ID_KEY]))
        logger.info("Created %s as %s (%s)", pending.fqdn, pending.id, RecordState.PENDING.value)

        return await self._confirm(pending, cancel_event)

    async def read(self, record_id: str, zone: str) -> DnsRecord | None:
        """
        Returns the record with the given id as currently listed.

        Args:
            record_id: The provider-assigned id.
            zone: The zone the record lives in.

        Returns:
            The confirmed record, or None when it is no longer listed
            (the caller should forget its stored id).

        Raises:
            ReadFailed: If the zone listing cannot be fetched or decoded.
        """
        record = await self._lookup(record_id, zone)
        if record is None:
            logger.warning("Record %s not found in %s (%s)", record_id, zone, RecordState.STALE.value)
        return record

    async def update(self, desired: DnsRecord) -> DnsRecord | None:
        """
        Replaces an existing record and returns the provider's resulting state.

        Args:
            desired: The full desired record, including its id.

        Returns:
            The record as listed after the update, or None if it vanished.

        Raises:
            MissingRequiredField: If the id or a type-required field is unset.
            UpdateFailed: If the provider rejects the update call
                or the listed record kept a different type.
            ReadFailed: If the follow-up listing fails.
        """
        if not desired.id:
            raise MissingRequiredField(desired.type.value, "id")
        wire = record_codec.encode(desired)

        logger.debug(
            "UPDATE %s %d in %s %s", desired.fqdn, desired.ttl, desired.type.value, desired.value
        )
        await self._limiter.acquire()
        try:
            updated = await self._provider.update_record(wire)
        except DnsProviderError as exc:
            raise UpdateFailed(f"Could not update {desired.id} ({desired.fqdn}): {exc}") from exc

        record_id = str(updated.get(record_codec.ID_KEY) or desired.id)
        current = await self.read(record_id, desired.zone)
        if current is not None and current.type != desired.type:
            raise UpdateFailed(
                f"Record {record_id} is still {current.type.value}; "
                f"ClouDNS cannot change it to {desired.type.value} in place"
            )
        return current

    async def delete(self, record_id: str, zone: str) -> None:
        """
        Deletes a record and checks that it is gone from the listing.

        Args:
            record_id: The provider-assigned id.
            zone: The zone the record lives in.

        Returns:
            None

        Raises:
            DeleteFailed: If the provider rejects the destroy call.
            ReadFailed: If the follow-up listing fails.
            DeleteNotObserved: If the record is still listed afterwards.
        """
        logger.debug("DELETE %s in %s", record_id, zone)
        await self._limiter.acquire()
        try:
            await self._provider.destroy_record(zone, record_id)
        except DnsProviderError as exc:
            raise DeleteFailed(f"Could not delete {record_id} in {zone}: {exc}") from exc

        remaining = await self._lookup(record_id, zone)
        if remaining is not None:
            raise DeleteNotObserved(
                f"Record {record_id} in {zone} still listed after a successful delete"
            )
        logger.info("Deleted %s in %s (%s)", record_id, zone, RecordState.DESTROYED.value)

    async def import_record(self, raw_identifier: str) -> DnsRecord:
        """
        Resolves a "zone/recordID" identifier into the listed record.

        Args:
            raw_identifier: The composite identifier, e.g. "example.com/123".

        Returns:
            The confirmed record.

        Raises:
            MalformedIdentifier: If the identifier is not zone/recordID.
            ReadFailed: If the zone listing fails.
            ImportRecordNotFound: If no record with that id is listed.
        """
        ref = parse_import_id(raw_identifier)
        record = await self._lookup(ref.record_id, ref.zone)
        if record is None:
            raise ImportRecordNotFound(f"No record {ref.record_id} in zone {ref.zone}")
        logger.info("Imported %s as %s", record.fqdn, record.id)
        return record

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _lookup(self, record_id: str, zone: str) -> DnsRecord | None:
        """
        Lists the zone and decodes the entry with the given id, if any.

        Args:
            record_id: The provider-assigned id.
            zone: The zone to list.

        Returns:
            The decoded record, or None if not listed.

        Raises:
            ReadFailed: If the listing fails or the entry cannot be decoded.
        """
        logger.debug("READ %s in %s", record_id, zone)
        await self._limiter.acquire()
        try:
            listing = await self._provider.list_records(zone)
            found = zone_index.find(listing, record_id)
            return record_codec.decode(found) if found is not None else None
        except DnsProviderError as exc:
            raise ReadFailed(f"Could not read {record_id} in {zone}: {exc}") from exc
        except (KeyError, ValueError) as exc:
            raise ReadFailed(f"Malformed listing entry for {record_id} in {zone}: {exc!r}") from exc

    async def _confirm(self, pending: DnsRecord, cancel_event: asyncio.Event | None) -> DnsRecord:
        """
        Polls the zone listing until the pending record shows up.

        Args:
            pending: The just-created record, carrying its new id.
            cancel_event: Optional caller cancellation signal.

        Returns:
            The confirmed record.

        Raises:
            ConfirmationTimeout: If the window elapses first.
            ConfirmationCancelled: If cancel_event gets set.
            ReadFailed: If a listing fails.
        """
        deadline = self._clock() + self._confirm_timeout
        delay = _POLL_INITIAL_DELAY
        attempt = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise ConfirmationCancelled(pending.zone, pending.id)

            attempt += 1
            confirmed = await self._lookup(pending.id, pending.zone)
            if confirmed is not None:
                logger.info(
                    "Record %s confirmed after %d poll(s) (%s)",
                    pending.id,
                    attempt,
                    RecordState.CONFIRMED.value,
                )
                return confirmed

            remaining = deadline - self._clock()
            if remaining <= 0:
                raise ConfirmationTimeout(pending.zone, pending.id, self._confirm_timeout)

            logger.debug("Record %s not visible yet, retrying in %.1fs", pending.id, min(delay, remaining))
            await self._backoff(min(delay, remaining), cancel_event)
            delay = min(delay * 2, _POLL_MAX_DELAY)

    async def _backoff(self, delay: float, cancel_event: asyncio.Event | None) -> None:
        """
        Sleeps between polls, returning early if cancel_event gets set.

        Args:
            delay: Seconds to wait.
            cancel_event: Optional caller cancellation signal.
        """
        if cancel_event is None:
            await self._sleep(delay)
            return

        sleeper = asyncio.ensure_future(self._sleep(delay))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, waiter):
                task.cancel()
            await asyncio.gather(sleeper, waiter, return_exceptions=True)
