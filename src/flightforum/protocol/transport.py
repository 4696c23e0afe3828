"""Transports carrying tool-call envelopes to backends.

- HttpTransport: reference transport, ``POST {base_url}/call_tool`` with JSON
- LocalTransport: routes envelopes to in-process ToolServer instances

Both honor the same contract: one request, one response, no streaming,
no batching, no retries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx
import orjson

from flightforum.foundation.errors import ErrorCode, MethodNotFoundError, TransportError
from flightforum.observability import get_logger

from .envelope import ToolCallEnvelope, ToolCallResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flightforum.servers.base import ToolServer

log = get_logger("flightforum.transport")

CALL_TOOL_PATH = "/call_tool"


@runtime_checkable
class Transport(Protocol):
    """Anything that can answer a tool-call envelope."""

    async def call(self, envelope: ToolCallEnvelope) -> ToolCallResult: ...

    async def aclose(self) -> None: ...


class HttpTransport:
    """httpx-backed transport for the reference wire format.

    Any non-2xx status or network failure surfaces as ``TransportError``; the
    body's ``error`` string is used as the message when present.

    Example:
        >>> transport = HttpTransport("http://localhost:8000", timeout=5.0)
        >>> result = await transport.call(envelope)
    """

    __slots__ = ("_base_url", "_timeout", "_client", "_owns_client")

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return f"{self._base_url}{CALL_TOOL_PATH}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def call(self, envelope: ToolCallEnvelope) -> ToolCallResult:
        name = envelope.describe()
        log.debug("posting tool call", call=name, url=self.url)
        try:
            response = await self._get_client().post(
                self.url,
                content=orjson.dumps(envelope.to_wire()),
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {name} timed out: {e}", tool_name=envelope.tool_name,
                                 code=ErrorCode.TIMEOUT) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Network error calling {name}: {e}", tool_name=envelope.tool_name) from e

        if not response.is_success:
            log.warning("tool call rejected", call=name, status=response.status_code)
            raise TransportError(
                _error_message(response),
                tool_name=envelope.tool_name,
                status_code=response.status_code,
            )

        try:
            body = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise TransportError(f"Response from {name} is not JSON", tool_name=envelope.tool_name,
                                 code=ErrorCode.PARSE_ERROR) from e
        return ToolCallResult.from_wire(body)


def _error_message(response: httpx.Response) -> str:
    try:
        data = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        data = {}
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP error {response.status_code}"


class LocalTransport:
    """Routes envelopes to in-process servers by ``server_name``.

    Protocol errors raised by a server propagate unchanged instead of being
    folded into TransportError as they are over HTTP.
    """

    __slots__ = ("_servers",)

    def __init__(self, servers: Iterable[ToolServer]) -> None:
        self._servers: dict[str, ToolServer] = {s.name: s for s in servers}

    @property
    def servers(self) -> dict[str, ToolServer]:
        return dict(self._servers)

    async def call(self, envelope: ToolCallEnvelope) -> ToolCallResult:
        server = self._servers.get(envelope.server_name)
        if server is None:
            raise MethodNotFoundError(f"Unknown server: {envelope.server_name}", tool_name=envelope.tool_name)
        return await server.call_tool(envelope.tool_name, dict(envelope.arguments))

    async def aclose(self) -> None:
        pass

