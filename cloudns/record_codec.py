"""
cloudns/record_codec.py

Responsibility: Maps DnsRecord values to and from the ClouDNS WireRecord shape,
including the type-specific fields (MX priority, SRV priority/weight/port).
Does NOT: make HTTP calls or decide which record to act on.
"""

from __future__ import annotations

from cloudns.dns_provider import TYPE_FIELDS, DnsRecord, RecordType, WireRecord
from exceptions import DnsProviderError, MissingRequiredField

# ClouDNS request parameter names
ZONE_KEY = "domain-name"
ID_KEY = "record-id"
HOST_KEY = "host"
TYPE_KEY = "record-type"
VALUE_KEY = "record"
TTL_KEY = "ttl"


def encode(record: DnsRecord) -> WireRecord:
    """
    Converts a DnsRecord into the ClouDNS request shape.

    Fields that do not apply to the record's type are omitted entirely
    rather than sent as zero.

    Args:
        record: The record to encode.

    Returns:
        A WireRecord dict ready for create or update.

    Raises:
        MissingRequiredField: If a field the type requires is unset.
    """
    wire: WireRecord = {
        ZONE_KEY: record.zone,
        HOST_KEY: record.host,
        TYPE_KEY: record.type.value,
        VALUE_KEY: record.value,
        TTL_KEY: record.ttl,
    }
    if record.id:
        wire[ID_KEY] = record.id

    for field_name in TYPE_FIELDS[record.type]:
        value = getattr(record, field_name)
        if value is None:
            raise MissingRequiredField(record.type.value, field_name)
        wire[field_name] = value

    return wire


def decode(wire: WireRecord) -> DnsRecord:
    """
    Converts a ClouDNS WireRecord into a DnsRecord.

    Only the type-specific fields the wire type warrants are populated; any
    others present on the wire are ignored. ClouDNS returns numbers as
    strings, so numeric fields are converted.

    Args:
        wire: A normalized WireRecord (see CloudnsClient.list_records).

    Returns:
        The decoded DnsRecord.

    Raises:
        DnsProviderError: If the wire record has an unsupported type.
    """
    raw_type = wire[TYPE_KEY]
    try:
        record_type = RecordType(raw_type)
    except ValueError as exc:
        raise DnsProviderError(f"Unsupported record type: {raw_type!r}") from exc

    record = DnsRecord(
        zone=wire[ZONE_KEY],
        host=wire.get(HOST_KEY) or "",
        type=record_type,
        value=wire[VALUE_KEY],
        ttl=int(wire[TTL_KEY]),
        id=str(wire.get(ID_KEY) or ""),
    )
    for field_name in TYPE_FIELDS[record_type]:
        value = wire.get(field_name)
        if value is not None and value != "":
            setattr(record, field_name, int(value))

    return record
