"""HTTP and MCP front doors for the backend adapters.

HTTP endpoints (reference wire format):
    POST /call_tool  → ``{server_name, tool_name, arguments}`` → ``{content: [...]}``
    GET  /tools      → every server with its tool schemas

Errors come back as ``{"error": ..., "code": ...}`` with 400 for invalid
params, 404 for unknown server/tool and 500 for internal failures.

Example:
    >>> from flightforum.servers import create_http_app
    >>> app = create_http_app()  # Starlette ASGI app
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Literal

import orjson
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from flightforum.foundation.errors import InvalidParamsError, MethodNotFoundError, ToolException
from flightforum.observability import get_logger
from flightforum.protocol import TOOL_REGISTRY, ToolCallEnvelope, ToolSpec, format_params_error

from .flight_tracker import FlightTrackerServer
from .user_management import UserManagementServer

if TYPE_CHECKING:
    from .base import ToolServer

McpTransport = Literal["stdio", "sse", "streamable-http"]

log = get_logger("flightforum.servers.app")


def default_servers() -> list[ToolServer]:
    """Both adapters backed by their in-memory tables."""
    return [FlightTrackerServer(), UserManagementServer()]


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP (Starlette)
# ═══════════════════════════════════════════════════════════════════════════════


def _error_response(e: ToolException) -> JSONResponse:
    return JSONResponse(e.error.to_wire(), status_code=e.error.http_status)


def create_http_app(servers: Iterable[ToolServer] | None = None) -> Starlette:
    """Create the ASGI app without running it."""
    by_name: dict[str, ToolServer] = {s.name: s for s in (servers if servers is not None else default_servers())}

    async def call_tool(request: Request) -> JSONResponse:
        try:
            body = orjson.loads(await request.body())
            envelope = ToolCallEnvelope.model_validate(body)
        except orjson.JSONDecodeError:
            return _error_response(InvalidParamsError("Request body is not valid JSON", tool_name="call_tool"))
        except ValidationError as e:
            return _error_response(InvalidParamsError(format_params_error(e), tool_name="call_tool"))

        server = by_name.get(envelope.server_name)
        if server is None:
            return _error_response(MethodNotFoundError(
                f"Unknown server: {envelope.server_name}", tool_name=envelope.tool_name,
            ))
        try:
            result = await server.call_tool(envelope.tool_name, dict(envelope.arguments))
        except ToolException as e:
            return _error_response(e)
        return JSONResponse(result.to_wire())

    async def list_tools(request: Request) -> JSONResponse:
        return JSONResponse({
            "servers": [
                {"name": s.name, "version": s.version, "tools": s.list_tools()}
                for s in by_name.values()
            ],
        })

    routes = [
        Route("/call_tool", call_tool, methods=["POST"]),
        Route("/tools", list_tools, methods=["GET"]),
    ]
    return Starlette(routes=routes)


def serve_http(
    servers: Iterable[ToolServer] | None = None,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> None:
    """Run the HTTP app under uvicorn (blocking)."""
    import uvicorn

    log.info("serving tools over http", host=host, port=port)
    uvicorn.run(create_http_app(servers), host=host, port=port)


# ═══════════════════════════════════════════════════════════════════════════════
# MCP (FastMCP)
# ═══════════════════════════════════════════════════════════════════════════════


def _tool_handler(server: ToolServer, spec: ToolSpec) -> Any:
    """Async handler whose signature lists the tool's wire-named arguments.

    FastMCP derives the input schema from the signature, so it is built
    from the params model instead of being written out per tool.
    """
    params: list[inspect.Parameter] = []
    annotations: dict[str, Any] = {}
    for field_name, field in spec.params.model_fields.items():
        wire_name = field.alias or field_name
        default = inspect.Parameter.empty if field.is_required() else field.default
        params.append(inspect.Parameter(wire_name, inspect.Parameter.KEYWORD_ONLY,
                                        default=default, annotation=field.annotation))
        annotations[wire_name] = field.annotation

    async def handler(**kwargs: Any) -> str:
        arguments = {k: v for k, v in kwargs.items() if v is not None}
        return (await server.call_tool(spec.name.value, arguments)).text()

    handler.__name__ = spec.name.value
    handler.__doc__ = spec.description
    handler.__signature__ = inspect.Signature(params, return_annotation=str)  # type: ignore[attr-defined]
    handler.__annotations__ = {**annotations, "return": str}
    return handler


def create_mcp_server(server: ToolServer) -> Any:
    """Wrap one adapter as a FastMCP server without starting it."""
    try:
        from fastmcp import FastMCP
    except ImportError as e:
        raise ImportError(
            "MCP serving requires fastmcp. "
            "Install with: pip install flightforum[mcp]"
        ) from e

    mcp = FastMCP(server.name)
    for spec in TOOL_REGISTRY[server.server_name].values():
        mcp.tool(name=spec.name.value, description=spec.description)(_tool_handler(server, spec))
    return mcp


def serve_mcp(
    server: ToolServer,
    *,
    transport: McpTransport = "stdio",
    host: str = "127.0.0.1",
    port: int = 8080,
) -> None:
    """Expose one adapter over the MCP protocol (blocking).

    Args:
        server: Adapter to expose
        transport: "stdio" (CLI), "sse" (HTTP), "streamable-http"
        host: Host for HTTP transports
        port: Port for HTTP transports
    """
    mcp = create_mcp_server(server)
    log.info("serving tools over mcp", server=server.name, transport=transport)
    if transport == "stdio":
        mcp.run()
    else:
        mcp.run(transport=transport, host=host, port=port)
