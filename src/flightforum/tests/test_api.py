"""Tests for the forum-facing flight API."""

from __future__ import annotations

import httpx
import pytest
from starlette.testclient import TestClient

from flightforum.client import McpClient, create_api_app
from flightforum.foundation.errors import PUBLIC_ERROR_MESSAGE
from flightforum.observability import CollectingRenderer
from flightforum.protocol import HttpTransport, LocalTransport, ToolCallEnvelope, ToolCallResult


def api(client: McpClient) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=create_api_app(client)), base_url="http://forum.test")


class ExplodingTransport:
    """Transport raising a non-protocol error on every call."""

    async def call(self, envelope: ToolCallEnvelope) -> ToolCallResult:
        raise RuntimeError("secret stack detail")

    async def aclose(self) -> None:
        pass


class ClosingTransport(ExplodingTransport):
    def __init__(self) -> None:
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


# ═════════════════════════════════════════════════════════════════════════════
# /api/flightDetails
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_flight_details(make_client, local_transport: LocalTransport) -> None:
    async with api(make_client(local_transport, enabled=False)) as http:
        response = await http.get("/api/flightDetails", params={"flightNumber": "aa123"})

    assert response.status_code == 200
    assert response.json()["flightNumber"] == "AA123"
    assert response.json()["gate"] == "G12"


@pytest.mark.asyncio
async def test_flight_details_soft_miss(make_client, local_transport: LocalTransport) -> None:
    async with api(make_client(local_transport, enabled=False)) as http:
        response = await http.get("/api/flightDetails", params={"flightNumber": "ZZ000"})

    assert response.status_code == 200
    assert response.json() == {"error": "Flight not found"}


@pytest.mark.asyncio
async def test_flight_details_requires_number(make_client, local_transport: LocalTransport) -> None:
    async with api(make_client(local_transport)) as http:
        missing = await http.get("/api/flightDetails")
        malformed = await http.get("/api/flightDetails", params={"flightNumber": "not a flight"})

    assert missing.status_code == 400
    assert missing.json() == {"error": "Flight number is required"}
    assert malformed.status_code == 400
    assert "Invalid flight number" in malformed.json()["error"]


@pytest.mark.asyncio
async def test_outage_without_fallback_hides_details(
    make_client, failing_transport: HttpTransport, logs: CollectingRenderer,
) -> None:
    async with api(make_client(failing_transport, enabled=False)) as http:
        response = await http.get("/api/flightDetails", params={"flightNumber": "AA123"})

    assert response.status_code == 500
    assert response.json() == {"error": PUBLIC_ERROR_MESSAGE}
    assert "connection refused" not in response.text
    failed = [e for e in logs.entries if e.event == "flight lookup failed"]
    assert failed[0].context["route"] == "flightDetails"
    assert "connection refused" in failed[0].context["error"]


@pytest.mark.asyncio
async def test_outage_with_fallback_serves_mock_data(make_client, failing_transport: HttpTransport) -> None:
    async with api(make_client(failing_transport, enabled=True)) as http:
        response = await http.get("/api/flightDetails", params={"flightNumber": "ZZ999"})

    assert response.status_code == 200
    assert response.json()["airline"] == "Mock Airline"


# ═════════════════════════════════════════════════════════════════════════════
# /api/searchFlights
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_search_flights(make_client, local_transport: LocalTransport) -> None:
    async with api(make_client(local_transport, enabled=False)) as http:
        hit = await http.get("/api/searchFlights", params={"origin": "jfk", "destination": "lax"})
        empty = await http.get("/api/searchFlights", params={"origin": "LAX", "destination": "JFK"})

    assert [f["flightNumber"] for f in hit.json()] == ["AA123"]
    assert empty.status_code == 200
    assert empty.json() == []


@pytest.mark.asyncio
async def test_search_requires_both_codes(make_client, local_transport: LocalTransport) -> None:
    async with api(make_client(local_transport)) as http:
        response = await http.get("/api/searchFlights", params={"origin": "JFK"})

    assert response.status_code == 400
    assert response.json() == {"error": "Origin and destination are required"}


@pytest.mark.asyncio
async def test_unexpected_error_is_generic_500(make_client, logs: CollectingRenderer) -> None:
    async with api(make_client(ExplodingTransport(), enabled=False)) as http:
        response = await http.get("/api/searchFlights", params={"origin": "JFK", "destination": "LAX"})

    assert response.status_code == 500
    assert response.json() == {"error": PUBLIC_ERROR_MESSAGE}
    assert "flight search failed" in logs.events("error")


def test_client_closed_on_shutdown(make_client) -> None:
    transport = ClosingTransport()
    with TestClient(create_api_app(make_client(transport))):
        assert not transport.closed
    assert transport.closed
