"""
cloudns/dns_provider.py

Responsibility: Defines the DnsRecord value object, the RecordType catalogue,
the WireRecord shape and the DNSProvider Protocol the Reconciler consumes.
Does NOT: make HTTP calls, map records to the wire, or implement any provider logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

# A provider-shaped record: ClouDNS request parameter names to values.
WireRecord = dict[str, Any]


class RecordType(str, Enum):
    """DNS record types this client manages."""

    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    MX = "MX"
    NS = "NS"
    TXT = "TXT"
    SRV = "SRV"
    ALIAS = "ALIAS"
    CAA = "CAA"
    PTR = "PTR"


# Type-specific fields each record type requires. Every RecordType member is
# listed so lookups never fall through to an implicit default.
TYPE_FIELDS: dict[RecordType, tuple[str, ...]] = {
    RecordType.A: (),
    RecordType.AAAA: (),
    RecordType.CNAME: (),
    RecordType.MX: ("priority",),
    RecordType.NS: (),
    RecordType.TXT: (),
    RecordType.SRV: ("priority", "weight", "port"),
    RecordType.ALIAS: (),
    RecordType.CAA: (),
    RecordType.PTR: (),
}

OPTIONAL_FIELDS = ("priority", "weight", "port")


# ---------------------------------------------------------------------------
# Value object: the canonical record shape used by the Reconciler
# ---------------------------------------------------------------------------


@dataclass
class DnsRecord:
    """
    Represents a single DNS resource record within a ClouDNS zone.

    The record is a tagged variant keyed by `type`: only the fields listed in
    TYPE_FIELDS for that type carry a value, the others stay None.
    """

    # Domain under which the record lives; changing it means destroy + recreate
    zone: str

    # Name component within the zone, e.g. "www" ("" is the zone apex)
    host: str

    type: RecordType

    # Target/content: an IP, a hostname, TXT data...
    value: str

    # TTL in seconds
    ttl: int

    # Provider-assigned identifier; "" until the record has been created
    id: str = ""

    # MX and SRV only
    priority: int | None = None

    # SRV only
    weight: int | None = None
    port: int | None = None

    def __post_init__(self) -> None:
        self.type = RecordType(self.type)

    @property
    def fqdn(self) -> str:
        return f"{self.host}.{self.zone}" if self.host else self.zone


# ---------------------------------------------------------------------------
# Abstract interface: the black-box RPCs the Reconciler relies on
# ---------------------------------------------------------------------------


@runtime_checkable
class DNSProvider(Protocol):
    """
    Abstract protocol for a zone/record DNS API.

    The provider only supports listing a whole zone; there is no point lookup
    by id. Records travel as WireRecord dicts produced by the record codec.
    """

    async def list_records(self, zone: str) -> list[WireRecord]:
        """
        Returns every record in the zone.

        Args:
            zone: The zone (domain name) to list.

        Returns:
            A list of WireRecord dicts, possibly empty.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...

    async def create_record(self, record: WireRecord) -> WireRecord:
        """
        Creates a record.

        Args:
            record: The encoded record, without "record-id".

        Returns:
            The record as sent, with the provider-assigned "record-id" set.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...

    async def update_record(self, record: WireRecord) -> WireRecord:
        """
        Replaces an existing record with the given one (whole-record put).

        Args:
            record: The encoded record, including "record-id".

        Returns:
            The record as accepted by the provider.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...

    async def destroy_record(self, zone: str, record_id: str) -> None:
        """
        Deletes a record.

        Args:
            zone: The zone the record lives in.
            record_id: The provider-assigned record identifier.

        Returns:
            None

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...
