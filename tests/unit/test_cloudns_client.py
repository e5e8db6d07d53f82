"""
tests/unit/test_cloudns_client.py

Unit tests for cloudns/cloudns_client.py.
All ClouDNS API calls are intercepted by respx, so there is no real network traffic.
"""

from __future__ import annotations

import httpx
import pytest

from cloudns.cloudns_client import CloudnsClient
from config import ProviderSettings
from exceptions import DnsProviderError

_ZONE = "example.com"
_BASE = "https://api.cloudns.net/dns"
_SETTINGS = ProviderSettings(auth_id=1234, sub_auth_id=None, password="test-password")


def _listing_entry(**kwargs):
    """Helper: build one records.json entry the way ClouDNS returns it."""
    entry = {
        "id": kwargs.get("id", "100"),
        "type": kwargs.get("type", "A"),
        "host": kwargs.get("host", "www"),
        "record": kwargs.get("record", "1.2.3.4"),
        "failover": "0",
        "ttl": kwargs.get("ttl", "3600"),
        "status": 1,
    }
    for field_name in ("priority", "weight", "port"):
        if field_name in kwargs:
            entry[field_name] = kwargs[field_name]
    return entry


def _failed(description="Invalid authentication, incorrect auth-id or auth-password."):
    return {"status": "Failed", "statusDescription": description}


# ---------------------------------------------------------------------------
# list_records
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_records_normalizes_entries(mock_http):
    """list_records returns one WireRecord per entry, keyed for the codec."""
    body = {
        "100": _listing_entry(),
        "101": _listing_entry(id="101", type="MX", host="", record="mx.example.com", priority="10"),
    }
    route = mock_http.get(f"{_BASE}/records.json").mock(
        return_value=httpx.Response(200, json=body)
    )
    async with httpx.AsyncClient() as client:
        cloudns = CloudnsClient(client, _SETTINGS)
        records = await cloudns.list_records(_ZONE)

    assert records[0] == {
        "domain-name": _ZONE,
        "record-id": "100",
        "host": "www",
        "record-type": "A",
        "record": "1.2.3.4",
        "ttl": "3600",
    }
    assert records[1]["priority"] == "10"

    params = route.calls.last.request.url.params
    assert params["domain-name"] == _ZONE
    assert params["auth-id"] == "1234"
    assert params["auth-password"] == "test-password"


@pytest.mark.asyncio
async def test_list_records_empty_zone_returns_empty_list(mock_http):
    """ClouDNS answers [] for a zone with no records."""
    mock_http.get(f"{_BASE}/records.json").mock(return_value=httpx.Response(200, json=[]))
    async with httpx.AsyncClient() as client:
        records = await CloudnsClient(client, _SETTINGS).list_records(_ZONE)

    assert records == []


@pytest.mark.asyncio
async def test_list_records_raises_on_failed_status(mock_http):
    """A status=Failed body is an error even with HTTP 200."""
    mock_http.get(f"{_BASE}/records.json").mock(return_value=httpx.Response(200, json=_failed()))
    async with httpx.AsyncClient() as client:
        with pytest.raises(DnsProviderError, match="Invalid authentication"):
            await CloudnsClient(client, _SETTINGS).list_records(_ZONE)


@pytest.mark.asyncio
async def test_list_records_raises_on_http_error(mock_http):
    mock_http.get(f"{_BASE}/records.json").mock(return_value=httpx.Response(500, text="oops"))
    async with httpx.AsyncClient() as client:
        with pytest.raises(DnsProviderError, match="500"):
            await CloudnsClient(client, _SETTINGS).list_records(_ZONE)


@pytest.mark.asyncio
async def test_list_records_raises_on_network_error(mock_http):
    mock_http.get(f"{_BASE}/records.json").mock(side_effect=httpx.ConnectError("refused"))
    async with httpx.AsyncClient() as client:
        with pytest.raises(DnsProviderError, match="Network error"):
            await CloudnsClient(client, _SETTINGS).list_records(_ZONE)


# ---------------------------------------------------------------------------
# create / update / destroy
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_record_returns_assigned_id(mock_http):
    """create_record merges data.id into the returned record."""
    route = mock_http.post(f"{_BASE}/add-record.json").mock(
        return_value=httpx.Response(
            200,
            json={"status": "Success", "statusDescription": "The record was added successfully.",
                  "data": {"id": 42}},
        )
    )
    wire = {"domain-name": _ZONE, "host": "www", "record-type": "A", "record": "1.2.3.4", "ttl": 600}
    async with httpx.AsyncClient() as client:
        created = await CloudnsClient(client, _SETTINGS).create_record(wire)

    assert created == {**wire, "record-id": "42"}
    params = route.calls.last.request.url.params
    assert params["record-type"] == "A"
    assert params["ttl"] == "600"
    assert "record-id" not in params


@pytest.mark.asyncio
async def test_create_record_without_id_in_response_raises(mock_http):
    mock_http.post(f"{_BASE}/add-record.json").mock(
        return_value=httpx.Response(200, json={"status": "Success", "statusDescription": "ok"})
    )
    wire = {"domain-name": _ZONE, "host": "www", "record-type": "A", "record": "1.2.3.4", "ttl": 600}
    async with httpx.AsyncClient() as client:
        with pytest.raises(DnsProviderError):
            await CloudnsClient(client, _SETTINGS).create_record(wire)


@pytest.mark.asyncio
async def test_update_record_does_not_send_type(mock_http):
    """mod-record.json cannot change the type, so record-type is left out."""
    route = mock_http.post(f"{_BASE}/mod-record.json").mock(
        return_value=httpx.Response(200, json={"status": "Success", "statusDescription": "ok"})
    )
    wire = {"domain-name": _ZONE, "record-id": "42", "host": "www", "record-type": "A",
            "record": "5.6.7.8", "ttl": 600}
    async with httpx.AsyncClient() as client:
        updated = await CloudnsClient(client, _SETTINGS).update_record(wire)

    assert updated == wire
    params = route.calls.last.request.url.params
    assert params["record-id"] == "42"
    assert params["record"] == "5.6.7.8"
    assert "record-type" not in params


@pytest.mark.asyncio
async def test_destroy_record_sends_zone_and_id(mock_http):
    route = mock_http.post(f"{_BASE}/delete-record.json").mock(
        return_value=httpx.Response(200, json={"status": "Success", "statusDescription": "ok"})
    )
    async with httpx.AsyncClient() as client:
        await CloudnsClient(client, _SETTINGS).destroy_record(_ZONE, "42")

    params = route.calls.last.request.url.params
    assert params["domain-name"] == _ZONE
    assert params["record-id"] == "42"


@pytest.mark.asyncio
async def test_sub_auth_id_is_sent_for_sub_users(mock_http):
    route = mock_http.post(f"{_BASE}/delete-record.json").mock(
        return_value=httpx.Response(200, json={"status": "Success", "statusDescription": "ok"})
    )
    settings = ProviderSettings(auth_id=None, sub_auth_id=99, password="pw")
    async with httpx.AsyncClient() as client:
        await CloudnsClient(client, settings).destroy_record(_ZONE, "42")

    params = route.calls.last.request.url.params
    assert params["sub-auth-id"] == "99"
    assert "auth-id" not in params


@pytest.mark.asyncio
async def test_destroy_record_raises_on_failed_status(mock_http):
    mock_http.post(f"{_BASE}/delete-record.json").mock(
        return_value=httpx.Response(200, json=_failed("Invalid record-id param."))
    )
    async with httpx.AsyncClient() as client:
        with pytest.raises(DnsProviderError, match="record-id"):
            await CloudnsClient(client, _SETTINGS).destroy_record(_ZONE, "404")
