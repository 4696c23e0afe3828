"""flightforum - flight-data access layer and threaded comments for a flight forum.

Flight and user data come from two tool backends (flight-tracker and
user-management) called through a small request/response protocol. When a
backend is unreachable, or the client runs on a local host, a fallback
resolver answers from static mock data instead and flags the result.

Quick Start (client):
    >>> from flightforum import ClientConfig, FallbackPolicy, McpClient, FlightTrackerService
    >>>
    >>> config = ClientConfig(base_url="http://localhost:8000", fallback=FallbackPolicy(enabled=True))
    >>> async with McpClient(config) as client:
    ...     flights = FlightTrackerService(client)
    ...     record = await flights.get_flight_details("AA123")
    ...     client.stats.fallback_calls  # > 0 when mock data was used

From environment settings:
    >>> from flightforum import ClientConfig, get_settings
    >>> config = ClientConfig.from_settings(get_settings())  # MCP_SERVER_URL, FLIGHTFORUM_*

In-process backends (tests, local runs):
    >>> from flightforum import LocalTransport, FlightTrackerServer, UserManagementServer
    >>> transport = LocalTransport([FlightTrackerServer(), UserManagementServer()])
    >>> client = McpClient(config, transport=transport)

Serving the backends:
    $ python -m flightforum.servers http --port 8000
    $ python -m flightforum.servers mcp flight-tracker      # requires flightforum[mcp]

Comments:
    >>> from flightforum import sample_board
    >>> for c in sample_board().tree("AA123").walk():
    ...     print("  " * c.depth, c.node.user, c.can_reply)
"""

from __future__ import annotations

__version__ = "0.1.0"

# Client
from .client import (
    CallStats,
    ClientConfig,
    FallbackPolicy,
    FallbackResolver,
    FlightTrackerService,
    McpClient,
    UserManagementService,
)

# Comments
from .comments import (
    MAX_REPLY_DEPTH,
    CommentBoard,
    CommentDraft,
    CommentNode,
    CommentTree,
    RenderedComment,
    sample_board,
    submit_comment,
)

# Foundation
from .foundation import (
    ErrorCode,
    FlightForumSettings,
    InternalError,
    InvalidParamsError,
    MethodNotFoundError,
    ToolError,
    ToolException,
    TransportError,
    get_settings,
)

# Models
from .models import FlightRecord, FlightStatus, SoftMiss, UserProfile

# Observability
from .observability import configure_logging, get_logger

# Protocol
from .protocol import HttpTransport, LocalTransport, ServerName, ToolCallEnvelope, ToolCallResult, ToolName

# Servers
from .servers import FlightTrackerServer, UserManagementServer, create_http_app

__all__ = [
    "__version__",
    # Client
    "ClientConfig", "McpClient", "CallStats", "FallbackPolicy", "FallbackResolver",
    "FlightTrackerService", "UserManagementService",
    # Comments
    "MAX_REPLY_DEPTH", "CommentNode", "CommentTree", "RenderedComment", "CommentBoard",
    "CommentDraft", "submit_comment", "sample_board",
    # Foundation
    "FlightForumSettings", "get_settings",
    "ErrorCode", "ToolError", "ToolException",
    "InvalidParamsError", "MethodNotFoundError", "InternalError", "TransportError",
    # Models
    "FlightRecord", "FlightStatus", "SoftMiss", "UserProfile",
    # Observability
    "configure_logging", "get_logger",
    # Protocol
    "ServerName", "ToolName", "ToolCallEnvelope", "ToolCallResult", "HttpTransport", "LocalTransport",
    # Servers
    "FlightTrackerServer", "UserManagementServer", "create_http_app",
]
