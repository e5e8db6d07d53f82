"""
cloudns/cloudns_client.py

Responsibility: Implements the DNSProvider protocol using the ClouDNS JSON API.
All ClouDNS HTTP calls are concentrated here; no other file may call the
ClouDNS API directly.
Does NOT: rate-limit, pick records out of a listing, or retry.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cloudns.dns_provider import OPTIONAL_FIELDS, WireRecord
from cloudns.record_codec import HOST_KEY, ID_KEY, TTL_KEY, TYPE_KEY, VALUE_KEY, ZONE_KEY
from config import ProviderSettings
from exceptions import DnsProviderError

logger = logging.getLogger(__name__)

_CLOUDNS_BASE = "https://api.cloudns.net/dns"


class CloudnsClient:
    """
    Implements DNSProvider for the ClouDNS DNS API.

    All outbound ClouDNS requests go through the injected httpx.AsyncClient,
    making this class fully testable without real network calls (use respx.mock).

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
        - ProviderSettings: supplies the auth-id / sub-auth-id and password
        - DNSProvider: this class satisfies the protocol contract
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: ProviderSettings) -> None:
        """
        Initialises the client with an HTTP client and validated credentials.

        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            settings: Validated ClouDNS credentials.
        """
        self._client = http_client
        self._auth = settings.auth_params()

    # ---------------------------------------------------------------------------
    # DNSProvider implementation
    # ---------------------------------------------------------------------------

    async def list_records(self, zone: str) -> list[WireRecord]:
        """
        Returns every record in the given zone, normalized to the WireRecord shape.

        ClouDNS answers with an object keyed by record id, or with an empty
        JSON array when the zone holds no records.

        Args:
            zone: The zone (domain name) to list.

        Returns:
            A list of WireRecord dicts, possibly empty.

        Raises:
            DnsProviderError: If the ClouDNS API returns an error.
        """
        body = await self._request("GET", "records.json", {ZONE_KEY: zone})

        if not body:
            return []
        if not isinstance(body, dict):
            raise DnsProviderError(f"Unexpected listing for zone {zone}: {body!r}")

        return [self._parse_record(zone, raw) for raw in body.values()]

    async def create_record(self, record: WireRecord) -> WireRecord:
        """
        Creates a record and returns it with the assigned "record-id".

        Args:
            record: The encoded record.

        Returns:
            A copy of the record carrying the new id.

        Raises:
            DnsProviderError: If the ClouDNS API returns an error or no id.
        """
        params = {k: v for k, v in record.items() if k != ID_KEY}
        body = await self._request("POST", "add-record.json", params)

        record_id = (body.get("data") or {}).get("id")
        if record_id is None:
            raise DnsProviderError(f"ClouDNS did not return a record id: {body!r}")

        return {**params, ID_KEY: str(record_id)}

    async def update_record(self, record: WireRecord) -> WireRecord:
        """
        Replaces the record identified by its "record-id".

        ClouDNS cannot change a record's type in place, so "record-type" is not sent.

        Args:
            record: The encoded record, including "record-id".

        Returns:
            The record as sent.

        Raises:
            DnsProviderError: If the ClouDNS API returns an error.
        """
        params = {k: v for k, v in record.items() if k != TYPE_KEY}
        await self._request("POST", "mod-record.json", params)
        return dict(record)

    async def destroy_record(self, zone: str, record_id: str) -> None:
        """
        Deletes a record from the given zone.

        Args:
            zone: The zone the record lives in.
            record_id: The ClouDNS-assigned record id.

        Returns:
            None

        Raises:
            DnsProviderError: If the ClouDNS API returns an error.
        """
        await self._request("POST", "delete-record.json", {ZONE_KEY: zone, ID_KEY: record_id})

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _request(self, method: str, endpoint: str, params: dict[str, Any]) -> Any:
        """
        Sends an authenticated request to the ClouDNS API.

        Args:
            method: HTTP verb ("GET" or "POST").
            endpoint: Path below the DNS API root, e.g. "records.json".
            params: Query parameters, without credentials.

        Returns:
            The parsed JSON response body.

        Raises:
            DnsProviderError: If the HTTP call fails or the body reports
                              status "Failed".
        """
        url = f"{_CLOUDNS_BASE}/{endpoint}"

        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = await self._client.request(
                method, url, params={**self._auth, **params}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DnsProviderError(
                f"ClouDNS API error {exc.response.status_code} for {method} {endpoint}: "
                f"{exc.response.text}"
            ) from exc
        except httpx.RequestError as exc:
            raise DnsProviderError(
                f"Network error calling ClouDNS API ({method} {endpoint}): {exc}"
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise DnsProviderError(
                f"ClouDNS returned a non-JSON body for {method} {endpoint}"
            ) from exc

        # NOTE: ClouDNS reports failures with HTTP 200 and {"status": "Failed", ...}
        if isinstance(body, dict) and body.get("status") == "Failed":
            raise DnsProviderError(
                f"ClouDNS API returned status=Failed for {method} {endpoint}: "
                f"{body.get('statusDescription', '')}"
            )

        return body

    @staticmethod
    def _parse_record(zone: str, raw: dict[str, Any]) -> WireRecord:
        """
        Normalizes one listing entry into the WireRecord shape used by the codec.

        Args:
            zone: The zone that was listed; entries do not repeat it.
            raw: A single record object from the records.json response.

        Returns:
            A WireRecord dict.
        """
        wire: WireRecord = {
            ZONE_KEY: zone,
            ID_KEY: str(raw["id"]),
            HOST_KEY: raw.get("host", ""),
            TYPE_KEY: raw["type"],
            VALUE_KEY: raw["record"],
            TTL_KEY: raw["ttl"],
        }
        for field_name in OPTIONAL_FIELDS:
            if raw.get(field_name) not in (None, ""):
                wire[field_name] = raw[field_name]
        return wire
