"""Standardized error handling for tool calls.

Protocol-level error codes shared by the client and the backend adapters,
plus structured error responses that can travel over the wire.
Uses Pydantic for validation and serialization.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class ErrorCode(StrEnum):
    """Error codes for tool call failures.

    The first three mirror the tool protocol taxonomy; the rest classify
    transport-level failures seen by the client.
    """
    INVALID_PARAMS = "INVALID_PARAMS"
    METHOD_NOT_FOUND = "METHOD_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    PARSE_ERROR = "PARSE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"


# HTTP status used when an error crosses the reference transport
_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_PARAMS: 400,
    ErrorCode.METHOD_NOT_FOUND: 404,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.NETWORK_ERROR: 502,
}

# Shown to end users instead of internal error text
PUBLIC_ERROR_MESSAGE = "Something went wrong while loading flight data. Please try again."


class ToolError(BaseModel):
    """Structured error for a failed tool call.

    Attributes:
        tool_name: Name of the tool that failed (or "transport")
        message: Human-readable error message
        code: Machine-readable error code
        recoverable: Whether the call might succeed if repeated
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
        json_schema_extra={
            "title": "Tool Error",
            "examples": [{
                "tool_name": "get_flight_details",
                "message": "Missing flightNumber argument",
                "code": "INVALID_PARAMS",
                "recoverable": False,
            }],
        },
    )

    tool_name: Annotated[str, Field(min_length=1)]
    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = False

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | Exception) -> str:
        """Accept Exception objects and extract message."""
        return str(v) if isinstance(v, Exception) else v

    @computed_field
    @property
    def http_status(self) -> int:
        """Status code used by the HTTP transport for this error."""
        return _HTTP_STATUS.get(self.code, 500)

    @property
    def public_message(self) -> str:
        """Generic retry prompt for end users; internal text is only logged."""
        return PUBLIC_ERROR_MESSAGE

    def to_wire(self) -> dict[str, str]:
        """Error body of the reference HTTP transport."""
        return {"error": self.message, "code": self.code.value}


class ToolException(Exception):
    """Exception wrapping a ToolError for raising."""

    __slots__ = ("error",)

    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = False

    def __init__(self, message: str, *, tool_name: str = "tool") -> None:
        self.error = ToolError(
            tool_name=tool_name or "tool",
            message=message,
            code=self.code,
            recoverable=self.recoverable,
        )
        super().__init__(message)

    @property
    def message(self) -> str:
        return self.error.message


class InvalidParamsError(ToolException):
    """Missing or malformed required arguments (caller error, not retried)."""
    code = ErrorCode.INVALID_PARAMS


class MethodNotFoundError(ToolException):
    """Unknown server/tool pairing."""
    code = ErrorCode.METHOD_NOT_FOUND


class InternalError(ToolException):
    """Adapter-side failure, carrying the underlying cause message."""
    code = ErrorCode.INTERNAL_ERROR


class TransportError(ToolException):
    """Network failure or non-2xx response on the way to a live backend."""
    code = ErrorCode.NETWORK_ERROR
    recoverable = True

    def __init__(
        self,
        message: str,
        *,
        tool_name: str = "transport",
        code: ErrorCode = ErrorCode.NETWORK_ERROR,
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.status_code = status_code
        super().__init__(message, tool_name=tool_name)
