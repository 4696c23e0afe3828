"""Request/response envelope for calling a named tool on a named backend.

A call is one ``ToolCallEnvelope`` answered by one ``ToolCallResult``. The
result's single text element holds the JSON-encoded domain payload.

Example:
    >>> env = ToolCallEnvelope(server_name="flight-tracker", tool_name="get_flight_details",
    ...                        arguments={"flightNumber": "AA123"})
    >>> env.to_wire()["tool_name"]
    'get_flight_details'
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from flightforum.foundation.errors import ErrorCode, TransportError

Primitive = str | int | float | bool | None


class ServerName(StrEnum):
    FLIGHT_TRACKER = "flight-tracker"
    USER_MANAGEMENT = "user-management"


class ToolName(StrEnum):
    GET_FLIGHT_DETAILS = "get_flight_details"
    SEARCH_FLIGHTS = "search_flights"
    CREATE_USER = "create_user"
    GET_USER = "get_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"


class ToolCallEnvelope(BaseModel):
    """One tool invocation: which backend, which tool, which arguments."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    server_name: str = Field(..., min_length=1)
    tool_name: str = Field(..., min_length=1)
    arguments: dict[str, Primitive] = Field(default_factory=dict)

    @field_validator("server_name", "tool_name", mode="before")
    @classmethod
    def _plain_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, str) else v

    def to_wire(self) -> dict[str, Any]:
        """JSON body of the reference HTTP transport."""
        return self.model_dump(mode="json")

    def describe(self) -> str:
        return f"{self.server_name}/{self.tool_name}"


class TextContent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    """Structured content returned by a tool.

    ``fallback`` is a client-side flag set when the content was synthesized
    by the fallback resolver instead of a live backend; it is never sent on
    the wire.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    content: list[TextContent] = Field(..., min_length=1)
    fallback: bool = Field(default=False, exclude=True)

    @classmethod
    def of(cls, payload: Any, *, fallback: bool = False) -> ToolCallResult:
        """Wrap a domain payload as pretty-printed JSON text content."""
        text = orjson.dumps(payload, option=orjson.OPT_INDENT_2, default=_json_default).decode()
        return cls(content=[TextContent(text=text)], fallback=fallback)

    @classmethod
    def from_wire(cls, data: Any) -> ToolCallResult:
        """Parse a transport response body, raising TransportError if malformed."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise TransportError(
                f"Malformed tool response: {e.error_count()} validation error(s)",
                code=ErrorCode.PARSE_ERROR,
            ) from e

    def text(self) -> str:
        """The single text element."""
        return self.content[0].text

    def payload(self) -> Any:
        """JSON-decoded domain payload."""
        try:
            return orjson.loads(self.text())
        except orjson.JSONDecodeError as e:
            raise TransportError(f"Tool payload is not JSON: {e}", code=ErrorCode.PARSE_ERROR) from e

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def _json_default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")
