"""Common shape of a tool backend.

A ``ToolServer`` owns the tools registered under its name. ``call_tool``
parses the request into its closed call variant, hands it to ``_dispatch``
and normalizes failures into the protocol taxonomy:

- InvalidParamsError / MethodNotFoundError / InternalError: propagate as-is
- anything else: wrapped as ``InternalError("Internal server error: ...")``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from flightforum.foundation.errors import InternalError, InvalidParamsError, ToolException
from flightforum.observability import get_logger
from flightforum.protocol import (
    TOOL_REGISTRY,
    ServerName,
    ToolCall,
    ToolCallEnvelope,
    ToolCallResult,
    format_params_error,
    parse_call,
)


class ToolServer(ABC):
    """Abstract base for backend adapters.

    Subclasses set ``server_name`` and implement ``_dispatch`` with one
    ``match`` case per tool they own.
    """

    server_name: ServerName
    version: str = "0.1.0"

    def __init__(self) -> None:
        self._log = get_logger(f"flightforum.servers.{self.server_name.value}", server=self.server_name.value)

    @property
    def name(self) -> str:
        return self.server_name.value

    def list_tools(self) -> list[dict[str, object]]:
        """List this server's tools with their input schemas."""
        return [spec.describe() for spec in TOOL_REGISTRY[self.server_name].values()]

    async def call_tool(self, tool_name: str, arguments: dict[str, Any] | None = None) -> ToolCallResult:
        """Run one tool call.

        Raises:
            MethodNotFoundError: tool is not registered on this server
            InvalidParamsError: arguments do not satisfy the tool's schema
            InternalError: the tool itself failed
        """
        try:
            envelope = ToolCallEnvelope(server_name=self.name, tool_name=tool_name, arguments=arguments or {})
        except ValidationError as e:
            raise InvalidParamsError(format_params_error(e), tool_name=tool_name or "tool") from e

        try:
            call = parse_call(envelope)
            return await self._dispatch(call)
        except ToolException as e:
            self._log.error("tool call failed", tool=tool_name, code=e.error.code.value, error=e.message)
            raise
        except Exception as e:
            self._log.exception("tool call crashed", tool=tool_name)
            raise InternalError(f"Internal server error: {e}", tool_name=tool_name) from e

    @abstractmethod
    async def _dispatch(self, call: ToolCall) -> ToolCallResult:
        """Execute a parsed call owned by this server."""
        ...


def not_found(reason: str) -> ToolCallResult:
    """Soft miss: a successful result whose payload reports the miss."""
    return ToolCallResult.of({"error": reason})
