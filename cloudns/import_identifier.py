"""
cloudns/import_identifier.py

Responsibility: Parses the "zone/recordID" identifier used to import
pre-existing records.
Does NOT: look the record up.
"""

from __future__ import annotations

from dataclasses import dataclass

from exceptions import MalformedIdentifier


@dataclass(frozen=True)
class ImportReference:
    """A parsed import identifier."""

    zone: str
    record_id: str


def parse_import_id(raw: str) -> ImportReference:
    """
    Splits a composite identifier into its zone and record id.

    No normalization is applied: "Example.com." and "example.com" are
    different zones here.

    Args:
        raw: The identifier, e.g. "example.com/123456".

    Returns:
        The parsed ImportReference.

    Raises:
        MalformedIdentifier: Unless raw has exactly two non-empty "/"-separated parts.
    """
    parts = raw.split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedIdentifier(
            f"Unexpected format of ID ({raw!r}), expected zone/recordID"
        )
    zone, record_id = parts
    return ImportReference(zone=zone, record_id=record_id)
