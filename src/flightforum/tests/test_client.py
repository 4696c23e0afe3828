"""Tests for the client, the fallback resolver and the typed facades."""

from __future__ import annotations

import httpx
import pytest

from flightforum.client import (
    MOCK_FLIGHTS,
    MOCK_USER_ID,
    ClientConfig,
    FallbackPolicy,
    FallbackResolver,
    FlightTrackerService,
    McpClient,
    UserManagementService,
)
from flightforum.foundation.config import FlightForumSettings
from flightforum.foundation.errors import InvalidParamsError, MethodNotFoundError, TransportError
from flightforum.models import CreateUserResult, DeleteUserResult, FlightRecord, SoftMiss, UpdateUserResult, UserProfile
from flightforum.observability import CollectingRenderer
from flightforum.protocol import HttpTransport, LocalTransport, ToolCallEnvelope, ToolCallResult


class CountingTransport:
    """Transport stub recording envelopes and answering from a LocalTransport."""

    def __init__(self, inner: LocalTransport) -> None:
        self.inner = inner
        self.calls: list[ToolCallEnvelope] = []

    async def call(self, envelope: ToolCallEnvelope) -> ToolCallResult:
        self.calls.append(envelope)
        return await self.inner.call(envelope)

    async def aclose(self) -> None:
        pass


# ═════════════════════════════════════════════════════════════════════════════
# Config
# ═════════════════════════════════════════════════════════════════════════════


def test_policy_from_host() -> None:
    assert FallbackPolicy.from_host("localhost").local
    assert FallbackPolicy.from_host("127.0.0.1").local
    assert not FallbackPolicy.from_host("flights.example.com").local
    assert not FallbackPolicy.disabled().enabled


def test_config_from_settings() -> None:
    settings = FlightForumSettings.model_validate({
        "http": {"mcp_server_url": "http://tools.internal:9000/", "timeout": 3},
        "fallback": {"enabled": False, "host": "localhost"},
    })
    config = ClientConfig.from_settings(settings)

    assert config.base_url == "http://tools.internal:9000"
    assert config.timeout == 3
    assert config.fallback == FallbackPolicy(enabled=False, local=True)


# ═════════════════════════════════════════════════════════════════════════════
# McpClient
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_live_call(make_client, local_transport: LocalTransport) -> None:
    async with make_client(local_transport, enabled=False) as client:
        result = await client.call_tool("flight-tracker", "get_flight_details", {"flightNumber": "AA123"})

    assert result.fallback is False
    assert result.payload()["gate"] == "G12"
    assert client.stats.live_calls == 1
    assert client.stats.fallback_calls == 0


@pytest.mark.asyncio
async def test_failure_propagates_when_fallback_disabled(make_client, failing_transport: HttpTransport) -> None:
    client = make_client(failing_transport, enabled=False)
    with pytest.raises(TransportError, match="connection refused"):
        await client.call_tool("flight-tracker", "get_flight_details", {"flightNumber": "AA123"})
    assert client.stats.failures == 1


@pytest.mark.asyncio
async def test_failure_falls_back_when_enabled(
    make_client, failing_transport: HttpTransport, logs: CollectingRenderer,
) -> None:
    client = make_client(failing_transport, enabled=True)
    result = await client.call_tool("flight-tracker", "get_flight_details", {"flightNumber": "AA123"})

    assert result.fallback is True
    assert result.payload() == MOCK_FLIGHTS["AA123"].to_payload()
    assert client.stats.fallback_calls == 1
    assert any(e.startswith("using mock data") for e in logs.events("warning"))


@pytest.mark.asyncio
async def test_local_mode_skips_live_call(make_client, local_transport: LocalTransport) -> None:
    transport = CountingTransport(local_transport)
    client = make_client(transport, local=True)
    result = await client.call_tool("flight-tracker", "search_flights", {"origin": "JFK", "destination": "LAX"})

    assert result.fallback is True
    assert transport.calls == []


@pytest.mark.asyncio
async def test_unknown_tool_raises_in_every_mode(make_client, failing_transport: HttpTransport) -> None:
    for enabled, local in [(False, False), (True, False), (True, True)]:
        client = make_client(failing_transport, enabled=enabled, local=local)
        with pytest.raises(MethodNotFoundError):
            await client.call_tool("flight-tracker", "book_flight", {})


@pytest.mark.asyncio
async def test_non_primitive_arguments_are_invalid_params(make_client, failing_transport: HttpTransport) -> None:
    for enabled, local in [(False, False), (True, False), (True, True)]:
        client = make_client(failing_transport, enabled=enabled, local=local)
        with pytest.raises(InvalidParamsError, match="origin"):
            await client.call_tool("flight-tracker", "search_flights", {"origin": ["JFK"], "destination": "LAX"})
        assert client.stats.total == 0


@pytest.mark.asyncio
async def test_non_2xx_is_treated_like_network_error(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Internal server error: boom", "code": "INTERNAL_ERROR"})

    transport = HttpTransport("http://tools.test", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    result = await make_client(transport, enabled=True).call_tool(
        "flight-tracker", "search_flights", {"origin": "JFK", "destination": "LAX"},
    )
    assert result.fallback is True


# ═════════════════════════════════════════════════════════════════════════════
# FallbackResolver
# ═════════════════════════════════════════════════════════════════════════════


def resolve(tool: str, server: str = "flight-tracker", **arguments: object) -> ToolCallResult:
    return FallbackResolver().resolve(ToolCallEnvelope(server_name=server, tool_name=tool, arguments=arguments))


def test_unknown_flight_gets_placeholder() -> None:
    payload = resolve("get_flight_details", flightNumber="ZZ999", date="2025-06-01").payload()
    record = FlightRecord.model_validate(payload)

    assert record.flight_number == "ZZ999"
    assert record.airline == "Mock Airline"
    assert (record.origin, record.destination) == ("MCK", "TST")
    assert payload["departureDate"] == "2025-06-01"


def test_empty_search_gets_placeholder() -> None:
    payload = resolve("search_flights", origin="bos", destination="SEA").payload()
    assert len(payload) == 1
    assert payload[0]["flightNumber"] == "MOCK123"
    assert (payload[0]["origin"], payload[0]["destination"]) == ("BOS", "SEA")


def test_search_hits_mock_table() -> None:
    payload = resolve("search_flights", origin="ORD", destination="MIA").payload()
    assert [f["flightNumber"] for f in payload] == ["UA789"]


def test_user_tools_have_live_shapes() -> None:
    created = CreateUserResult.model_validate(
        resolve("create_user", "user-management", email="neo@example.com", password="x").payload(),
    )
    assert (created.user_id, created.username) == (MOCK_USER_ID, "neo")

    profile = UserProfile.model_validate(resolve("get_user", "user-management", email="neo@example.com").payload())
    assert profile.email == "neo@example.com"

    updated = UpdateUserResult.model_validate(
        resolve("update_user", "user-management", userId="u1", username="trinity").payload(),
    )
    assert (updated.user.id, updated.user.username) == ("u1", "trinity")

    deleted = DeleteUserResult.model_validate(resolve("delete_user", "user-management", userId="u1").payload())
    assert deleted.success


def test_resolver_still_validates_arguments() -> None:
    with pytest.raises(InvalidParamsError):
        resolve("search_flights", origin="JFK")


def test_resolver_without_mock_for_call_is_method_not_found() -> None:
    with pytest.raises(MethodNotFoundError, match="No mock data"):
        FallbackResolver()._payload(object())


# ═════════════════════════════════════════════════════════════════════════════
# Facades
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_flight_facade_live(make_client, local_transport: LocalTransport) -> None:
    flights = FlightTrackerService(make_client(local_transport, enabled=False))

    record = await flights.get_flight_details("aa123")
    assert isinstance(record, FlightRecord)
    assert (record.origin, record.destination, record.status) == ("JFK", "LAX", "On Time")

    miss = await flights.get_flight_details("ZZ000")
    assert miss == SoftMiss(error="Flight not found")

    assert [r.flight_number for r in await flights.search_flights("jfk", "lax")] == ["AA123"]
    assert await flights.search_flights("LAX", "JFK") == []


@pytest.mark.asyncio
async def test_facade_sends_only_set_arguments(make_client, local_transport: LocalTransport) -> None:
    transport = CountingTransport(local_transport)
    flights = FlightTrackerService(make_client(transport, enabled=False))
    await flights.get_flight_details("AA123")
    await flights.get_flight_details("AA123", date="2025-03-10")

    assert transport.calls[0].arguments == {"flightNumber": "AA123"}
    assert transport.calls[1].arguments == {"flightNumber": "AA123", "date": "2025-03-10"}


@pytest.mark.asyncio
async def test_facade_rejects_malformed_input(make_client, failing_transport: HttpTransport) -> None:
    flights = FlightTrackerService(make_client(failing_transport, enabled=True))
    with pytest.raises(InvalidParamsError):
        await flights.get_flight_details("not a flight")
    with pytest.raises(InvalidParamsError):
        await flights.search_flights("J F K", "LAX")


@pytest.mark.asyncio
async def test_every_facade_method_survives_outage(make_client, failing_transport: HttpTransport) -> None:
    client = make_client(failing_transport, enabled=True)
    flights, users = FlightTrackerService(client), UserManagementService(client)

    assert isinstance(await flights.get_flight_details("QF1"), FlightRecord)
    assert all(isinstance(r, FlightRecord) for r in await flights.search_flights("JFK", "LAX"))
    assert isinstance(await users.create_user("neo@example.com", "matrix1"), CreateUserResult)
    assert isinstance(await users.get_user(user_id="u1"), UserProfile)
    assert isinstance(await users.update_user("u1", full_name="Neo"), UpdateUserResult)
    assert isinstance(await users.delete_user("u1"), DeleteUserResult)
    assert client.stats.fallback_calls == 6


@pytest.mark.asyncio
async def test_every_facade_method_propagates_without_fallback(
    make_client, failing_transport: HttpTransport,
) -> None:
    client = make_client(failing_transport, enabled=False)
    flights, users = FlightTrackerService(client), UserManagementService(client)

    calls = [
        flights.get_flight_details("AA123"),
        flights.search_flights("JFK", "LAX"),
        users.create_user("neo@example.com", "matrix1"),
        users.get_user(email="neo@example.com"),
        users.update_user("u1", username="neo"),
        users.delete_user("u1"),
    ]
    for call in calls:
        with pytest.raises(TransportError):
            await call
    assert client.stats.failures == 6


@pytest.mark.asyncio
async def test_user_facade_round_trip(make_client, local_transport: LocalTransport) -> None:
    users = UserManagementService(make_client(local_transport, enabled=False))

    created = await users.create_user("trin@example.com", "matrix1", full_name="Trinity")
    assert isinstance(created, CreateUserResult)

    fetched = await users.get_user(email="trin@example.com")
    assert isinstance(fetched, UserProfile)
    assert fetched.full_name == "Trinity"

    updated = await users.update_user(created.user_id, username="trin")
    assert isinstance(updated, UpdateUserResult)
    assert updated.user.username == "trin"

    deleted = await users.delete_user(created.user_id)
    assert isinstance(deleted, DeleteUserResult)
    assert deleted.warning is None

    assert await users.get_user(user_id=created.user_id) == SoftMiss(error="User not found")


@pytest.mark.asyncio
async def test_get_user_needs_a_key(make_client, local_transport: LocalTransport) -> None:
    with pytest.raises(InvalidParamsError):
        await UserManagementService(make_client(local_transport)).get_user()


def test_client_default_transport_is_http() -> None:
    client = McpClient(ClientConfig(base_url="http://tools.test/"))
    assert client.config.base_url == "http://tools.test"
