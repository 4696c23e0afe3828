"""Shared fixtures: in-process backends, failing transports, captured logs."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

from flightforum.client import ClientConfig, FallbackPolicy, McpClient
from flightforum.foundation.config import clear_settings_cache
from flightforum.observability import CollectingRenderer, set_renderer
from flightforum.protocol import HttpTransport, LocalTransport, Transport
from flightforum.servers import (
    FlightTrackerServer,
    InMemoryIdentityService,
    InMemoryProfileStore,
    UserManagementServer,
)

BASE_URL = "http://tools.test"


@pytest.fixture(autouse=True)
def logs() -> Iterator[CollectingRenderer]:
    """Capture structured log entries instead of printing them."""
    renderer = CollectingRenderer()
    set_renderer(renderer)
    yield renderer
    set_renderer(None)


@pytest.fixture(autouse=True)
def clean_settings() -> Iterator[None]:
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def flight_server() -> FlightTrackerServer:
    return FlightTrackerServer()


@pytest.fixture
def identity() -> InMemoryIdentityService:
    return InMemoryIdentityService()


@pytest.fixture
def profiles() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def user_server(identity: InMemoryIdentityService, profiles: InMemoryProfileStore) -> UserManagementServer:
    return UserManagementServer(identity, profiles)


@pytest.fixture
def local_transport(flight_server: FlightTrackerServer, user_server: UserManagementServer) -> LocalTransport:
    return LocalTransport([flight_server, user_server])


def http_transport(handler: httpx.MockTransport) -> HttpTransport:
    return HttpTransport(BASE_URL, client=httpx.AsyncClient(transport=handler))


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def failing_transport() -> HttpTransport:
    """HTTP transport whose every request fails to connect."""
    return http_transport(httpx.MockTransport(_refuse))


ClientFactory = Callable[..., McpClient]


@pytest.fixture
def make_client() -> ClientFactory:
    """Build a client over a given transport with an explicit fallback policy."""

    def factory(transport: Transport, *, enabled: bool = True, local: bool = False) -> McpClient:
        config = ClientConfig(base_url=BASE_URL, fallback=FallbackPolicy(enabled=enabled, local=local))
        return McpClient(config, transport=transport)

    return factory
