"""Client side of the tool protocol: config, fallback resolver and typed facades.

Example:
    >>> from flightforum.client import ClientConfig, FallbackPolicy, McpClient, FlightTrackerService
    >>> config = ClientConfig(base_url="http://localhost:8000", fallback=FallbackPolicy.from_host("localhost"))
    >>> async with McpClient(config) as client:
    ...     flights = await FlightTrackerService(client).search_flights("jfk", "lax")
"""

from .api import create_api_app, serve_api
from .client import CallStats, ClientConfig, McpClient
from .fallback import (
    MOCK_FLIGHTS,
    MOCK_USER_ID,
    FallbackPolicy,
    FallbackResolver,
    placeholder_flight,
    placeholder_search,
)
from .services import FlightTrackerService, UserManagementService

__all__ = [
    "ClientConfig", "McpClient", "CallStats",
    "FallbackPolicy", "FallbackResolver", "MOCK_FLIGHTS", "MOCK_USER_ID",
    "placeholder_flight", "placeholder_search",
    "FlightTrackerService", "UserManagementService",
    "create_api_app", "serve_api",
]
