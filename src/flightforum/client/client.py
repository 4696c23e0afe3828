"""Tool-call client with fallback.

Per call:

1. (server, tool) must be registered, else ``MethodNotFoundError``
2. local/dev context: answer from the fallback table, skip the live call
3. otherwise call the live transport
4. on any failure: fallback table if enabled, else re-raise unchanged

Example:
    >>> config = ClientConfig(base_url="http://localhost:8000", fallback=FallbackPolicy(enabled=False))
    >>> async with McpClient(config) as client:
    ...     result = await client.call_tool("flight-tracker", "get_flight_details", {"flightNumber": "AA123"})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, ValidationError, field_validator

from flightforum.foundation.errors import InvalidParamsError, MethodNotFoundError
from flightforum.observability import get_logger
from flightforum.protocol import (
    HttpTransport,
    ToolCallEnvelope,
    ToolCallResult,
    Transport,
    ensure_registered,
    format_params_error,
)

from .fallback import FallbackPolicy, FallbackResolver

if TYPE_CHECKING:
    from flightforum.foundation.config import FlightForumSettings

log = get_logger("flightforum.client")


class ClientConfig(BaseModel):
    """Everything the client needs, passed in explicitly."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "http://localhost:8000"
    timeout: PositiveFloat = 10.0
    fallback: FallbackPolicy = Field(default_factory=FallbackPolicy)

    @field_validator("base_url", mode="after")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_settings(cls, settings: FlightForumSettings) -> ClientConfig:
        return cls(
            base_url=settings.http.mcp_server_url,
            timeout=settings.http.timeout,
            fallback=FallbackPolicy(enabled=settings.fallback.enabled, local=settings.fallback.is_local),
        )


@dataclass(slots=True)
class CallStats:
    """Counters for how calls were answered."""

    live_calls: int = 0
    fallback_calls: int = 0
    failures: int = 0

    @property
    def total(self) -> int:
        return self.live_calls + self.fallback_calls + self.failures


class McpClient:
    """Issues tool calls over a transport, falling back to mock data per policy."""

    __slots__ = ("_config", "_transport", "_resolver", "_stats")

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
        *,
        resolver: FallbackResolver | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = transport or HttpTransport(self._config.base_url, timeout=self._config.timeout)
        self._resolver = resolver or FallbackResolver()
        self._stats = CallStats()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def stats(self) -> CallStats:
        return self._stats

    async def call_tool(
        self,
        server_name: str,
        tool_name: str,
        arguments: dict[str, Any] | None = None,
    ) -> ToolCallResult:
        """Call ``tool_name`` on ``server_name``.

        Raises:
            MethodNotFoundError: unregistered server/tool, in every mode
            InvalidParamsError: arguments are not a flat mapping of primitives
            ToolException: live failure with fallback disabled (unchanged)
        """
        ensure_registered(server_name, tool_name)
        try:
            envelope = ToolCallEnvelope(server_name=server_name, tool_name=tool_name, arguments=arguments or {})
        except ValidationError as e:
            raise InvalidParamsError(format_params_error(e), tool_name=tool_name) from e
        policy = self._config.fallback

        if policy.local:
            self._stats.fallback_calls += 1
            return self._resolver.resolve(envelope, reason="local host")

        try:
            result = await self._transport.call(envelope)
        except MethodNotFoundError:
            self._stats.failures += 1
            raise
        except Exception as e:
            log.error("tool call failed", call=envelope.describe(), error=str(e), error_type=type(e).__name__)
            if not policy.enabled:
                self._stats.failures += 1
                raise
            self._stats.fallback_calls += 1
            return self._resolver.resolve(envelope, reason=str(e) or type(e).__name__)

        self._stats.live_calls += 1
        return result

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> McpClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()
