"""Backend adapters exposing the registered tools.

- FlightTrackerServer: ``get_flight_details``, ``search_flights``
- UserManagementServer: ``create_user``, ``get_user``, ``update_user``, ``delete_user``

Serve them over HTTP with ``serve_http`` or one at a time over MCP with
``serve_mcp`` (requires ``pip install flightforum[mcp]``).
"""

from .app import create_http_app, create_mcp_server, default_servers, serve_http, serve_mcp
from .base import ToolServer, not_found
from .flight_tracker import SAMPLE_FLIGHTS, FlightTable, FlightTrackerServer
from .stores import (
    PROFILE_NOT_FOUND_CODE,
    IdentityRecord,
    IdentityService,
    IdentityServiceError,
    InMemoryIdentityService,
    InMemoryProfileStore,
    ProfileNotFound,
    ProfileStore,
    ProfileStoreError,
)
from .user_management import UserManagementServer

__all__ = [
    # Base
    "ToolServer", "not_found",
    # flight-tracker
    "FlightTrackerServer", "FlightTable", "SAMPLE_FLIGHTS",
    # user-management
    "UserManagementServer",
    "IdentityService", "IdentityRecord", "IdentityServiceError",
    "ProfileStore", "ProfileStoreError", "ProfileNotFound", "PROFILE_NOT_FOUND_CODE",
    "InMemoryIdentityService", "InMemoryProfileStore",
    # Serving
    "create_http_app", "serve_http", "create_mcp_server", "serve_mcp", "default_servers",
]
