"""Tool invocation protocol: envelope, closed registry and transports.

Example:
    >>> from flightforum.protocol import ToolCallEnvelope, HttpTransport
    >>> transport = HttpTransport("http://localhost:8000")
    >>> result = await transport.call(ToolCallEnvelope(
    ...     server_name="flight-tracker", tool_name="get_flight_details",
    ...     arguments={"flightNumber": "AA123"},
    ... ))
    >>> result.payload()["origin"]
    'JFK'
"""

from .envelope import ServerName, TextContent, ToolCallEnvelope, ToolCallResult, ToolName
from .registry import (
    TOOL_REGISTRY,
    CreateUserCall,
    CreateUserParams,
    DeleteUserCall,
    DeleteUserParams,
    FlightTrackerCall,
    GetFlightDetailsCall,
    GetFlightDetailsParams,
    GetUserCall,
    GetUserParams,
    SearchFlightsCall,
    SearchFlightsParams,
    ToolCall,
    ToolParams,
    ToolSpec,
    UpdateUserCall,
    UpdateUserParams,
    UserManagementCall,
    ensure_registered,
    format_params_error,
    parse_call,
)
from .transport import CALL_TOOL_PATH, HttpTransport, LocalTransport, Transport

__all__ = [
    # Envelope
    "ServerName", "ToolName", "ToolCallEnvelope", "TextContent", "ToolCallResult",
    # Registry
    "TOOL_REGISTRY", "ToolSpec", "ToolParams", "ToolCall",
    "FlightTrackerCall", "UserManagementCall",
    "GetFlightDetailsParams", "SearchFlightsParams", "CreateUserParams",
    "GetUserParams", "UpdateUserParams", "DeleteUserParams",
    "GetFlightDetailsCall", "SearchFlightsCall", "CreateUserCall",
    "GetUserCall", "UpdateUserCall", "DeleteUserCall",
    "ensure_registered", "parse_call", "format_params_error",
    # Transport
    "CALL_TOOL_PATH", "Transport", "HttpTransport", "LocalTransport",
]
