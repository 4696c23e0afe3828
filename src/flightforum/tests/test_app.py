"""Tests for the HTTP front door."""

from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from flightforum.servers import FlightTrackerServer, InMemoryProfileStore, UserManagementServer, create_http_app


@pytest.fixture
def http(flight_server: FlightTrackerServer, user_server: UserManagementServer) -> TestClient:
    return TestClient(create_http_app([flight_server, user_server]))


def call(http: TestClient, server: str, tool: str, **arguments: object):
    return http.post("/call_tool", json={"server_name": server, "tool_name": tool, "arguments": arguments})


def test_call_tool_success(http: TestClient) -> None:
    response = call(http, "flight-tracker", "get_flight_details", flightNumber="AA123")

    assert response.status_code == 200
    content = response.json()["content"]
    assert content[0]["type"] == "text"
    assert '"origin": "JFK"' in content[0]["text"]


def test_soft_miss_is_200(http: TestClient) -> None:
    response = call(http, "flight-tracker", "get_flight_details", flightNumber="ZZ000")
    assert response.status_code == 200
    assert "Flight not found" in response.json()["content"][0]["text"]


def test_invalid_params_is_400(http: TestClient) -> None:
    response = call(http, "flight-tracker", "search_flights", origin="JFK")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required arguments: destination", "code": "INVALID_PARAMS"}


def test_unknown_tool_and_server_are_404(http: TestClient) -> None:
    assert call(http, "flight-tracker", "book_flight").status_code == 404
    response = call(http, "weather", "forecast")
    assert response.status_code == 404
    assert response.json()["error"] == "Unknown server: weather"


def test_internal_error_is_500(http: TestClient, profiles: InMemoryProfileStore) -> None:
    profiles.fail("get", "permission denied")
    response = call(http, "user-management", "get_user", userId="u1")
    assert response.status_code == 500
    assert response.json() == {"error": "permission denied", "code": "INTERNAL_ERROR"}


def test_malformed_body_is_400(http: TestClient) -> None:
    response = http.post("/call_tool", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PARAMS"

    response = http.post("/call_tool", json={"server_name": "flight-tracker"})
    assert response.status_code == 400


def test_list_tools(http: TestClient) -> None:
    servers = {s["name"]: s for s in http.get("/tools").json()["servers"]}
    assert set(servers) == {"flight-tracker", "user-management"}
    tools = {t["name"]: t for t in servers["user-management"]["tools"]}
    assert tools["delete_user"]["inputSchema"]["required"] == ["userId"]
