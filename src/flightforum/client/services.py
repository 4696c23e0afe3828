"""Typed facades over the tool-call client.

Each method builds the arguments mapping, makes one call and parses the
single text payload into its record type. Soft misses come back as
``SoftMiss`` values, protocol errors propagate. No retries, no caching.

Example:
    >>> flights = FlightTrackerService(client)
    >>> record = await flights.get_flight_details("aa123")
    >>> record.origin
    'JFK'
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from flightforum.foundation.errors import ErrorCode, InvalidParamsError, TransportError
from flightforum.models import (
    CreateUserResult,
    DeleteUserResult,
    FlightRecord,
    SoftMiss,
    UpdateUserResult,
    UserProfile,
    is_airport_code,
    is_flight_number,
    normalize_flight_number,
)
from flightforum.protocol import ServerName, ToolCallResult, ToolName

from .client import McpClient

M = TypeVar("M", bound=BaseModel)

_FlightList = TypeAdapter(list[FlightRecord])


def _args(**kw: Any) -> dict[str, Any]:
    """Drop unset optional arguments."""
    return {k: v for k, v in kw.items() if v is not None}


def _parse(result: ToolCallResult, model: type[M]) -> M | SoftMiss:
    payload = result.payload()
    try:
        if isinstance(payload, dict) and set(payload) == {"error"}:
            return SoftMiss.model_validate(payload)
        return model.model_validate(payload)
    except ValidationError as e:
        raise TransportError(
            f"Unexpected {model.__name__} payload: {e.error_count()} validation error(s)",
            code=ErrorCode.PARSE_ERROR,
        ) from e


class FlightTrackerService:
    """``get_flight_details`` and ``search_flights`` as typed calls."""

    __slots__ = ("_client",)

    def __init__(self, client: McpClient) -> None:
        self._client = client

    async def _call(self, tool: ToolName, arguments: dict[str, Any]) -> ToolCallResult:
        return await self._client.call_tool(ServerName.FLIGHT_TRACKER, tool, arguments)

    async def get_flight_details(self, flight_number: str, date: str | None = None) -> FlightRecord | SoftMiss:
        number = normalize_flight_number(flight_number)
        if not is_flight_number(number):
            raise InvalidParamsError(f"Invalid flight number: {flight_number!r}", tool_name=ToolName.GET_FLIGHT_DETAILS)
        result = await self._call(ToolName.GET_FLIGHT_DETAILS, _args(flightNumber=number, date=date))
        return _parse(result, FlightRecord)

    async def search_flights(self, origin: str, destination: str, date: str | None = None) -> list[FlightRecord]:
        origin, destination = origin.strip().upper(), destination.strip().upper()
        for code in (origin, destination):
            if not is_airport_code(code):
                raise InvalidParamsError(f"Invalid airport code: {code!r}", tool_name=ToolName.SEARCH_FLIGHTS)
        result = await self._call(
            ToolName.SEARCH_FLIGHTS, _args(origin=origin, destination=destination, date=date),
        )
        try:
            return _FlightList.validate_python(result.payload())
        except ValidationError as e:
            raise TransportError(
                f"Unexpected search payload: {e.error_count()} validation error(s)", code=ErrorCode.PARSE_ERROR,
            ) from e


class UserManagementService:
    """User CRUD as typed calls."""

    __slots__ = ("_client",)

    def __init__(self, client: McpClient) -> None:
        self._client = client

    async def _call(self, tool: ToolName, arguments: dict[str, Any]) -> ToolCallResult:
        return await self._client.call_tool(ServerName.USER_MANAGEMENT, tool, arguments)

    async def create_user(
        self,
        email: str,
        password: str,
        *,
        username: str | None = None,
        full_name: str | None = None,
    ) -> CreateUserResult | SoftMiss:
        result = await self._call(
            ToolName.CREATE_USER,
            _args(email=email, password=password, username=username, full_name=full_name),
        )
        return _parse(result, CreateUserResult)

    async def get_user(self, *, user_id: str | None = None, email: str | None = None) -> UserProfile | SoftMiss:
        if not user_id and not email:
            raise InvalidParamsError("Missing required parameter: userId or email", tool_name=ToolName.GET_USER)
        result = await self._call(ToolName.GET_USER, _args(userId=user_id or None, email=email or None))
        return _parse(result, UserProfile)

    async def update_user(
        self,
        user_id: str,
        *,
        username: str | None = None,
        full_name: str | None = None,
        avatar_url: str | None = None,
    ) -> UpdateUserResult | SoftMiss:
        result = await self._call(
            ToolName.UPDATE_USER,
            _args(userId=user_id, username=username, full_name=full_name, avatar_url=avatar_url),
        )
        return _parse(result, UpdateUserResult)

    async def delete_user(self, user_id: str) -> DeleteUserResult | SoftMiss:
        result = await self._call(ToolName.DELETE_USER, {"userId": user_id})
        return _parse(result, DeleteUserResult)
