"""
cloudns/zone_index.py

Responsibility: Locates the record with a given id inside a full zone listing.
Does NOT: fetch listings or decode records.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from cloudns.dns_provider import WireRecord
from cloudns.record_codec import ID_KEY

logger = logging.getLogger(__name__)


def find(records: Sequence[WireRecord], want_id: str) -> WireRecord | None:
    """
    Returns the record whose id equals want_id, or None if there is none.

    Matching is strictly by id. ClouDNS lets records with identical host,
    type and value coexist under distinct ids, so no other attribute is ever
    used to pick a record.

    Args:
        records: Every record in the zone, as returned by list_records().
        want_id: The provider-assigned id to look for.

    Returns:
        The matching WireRecord, or None when the record is not listed
        (drifted or deleted remotely, not an error).
    """
    if not want_id:
        return None

    matches = [r for r in records if str(r.get(ID_KEY, "")) == want_id]
    if not matches:
        return None

    if len(matches) > 1:
        # NOTE: ids are unique per zone; a repeat means the listing itself is odd.
        logger.warning("Zone listing holds %d records with id %s", len(matches), want_id)
    return matches[0]
