"""Mock-fallback resolver for degraded or local runs.

When the live backend is unreachable, or the client runs on a local/dev
host, calls are answered from a small static table instead. Responses have
exactly the shape of the live adapters' success payloads, and a missing key
yields a well-formed placeholder rather than a miss, so in fallback mode a
call always appears to succeed. Every synthesized result carries
``fallback=True`` and is logged at WARNING.

Example:
    >>> resolver = FallbackResolver()
    >>> result = resolver.resolve(envelope, reason="connection refused")
    >>> result.fallback
    True
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from flightforum.foundation.config import LOCAL_HOSTS
from flightforum.foundation.errors import InvalidParamsError, MethodNotFoundError
from flightforum.models import (
    CreateUserResult,
    DeleteUserResult,
    FlightRecord,
    UpdateUserResult,
    UserProfile,
    normalize_flight_number,
    username_from_email,
)
from flightforum.observability import get_logger
from flightforum.protocol import (
    CreateUserCall,
    DeleteUserCall,
    GetFlightDetailsCall,
    GetUserCall,
    SearchFlightsCall,
    ToolCallEnvelope,
    ToolCallResult,
    UpdateUserCall,
    parse_call,
)

log = get_logger("flightforum.fallback")

MOCK_DATE = "2025-03-10"
MOCK_USER_ID = "mock-user-id"
MOCK_EMAIL = "mock@example.com"
MOCK_USERNAME = "mockuser"
MOCK_FULL_NAME = "Mock User"


class FallbackPolicy(BaseModel):
    """When to answer from the static table.

    Attributes:
        enabled: Synthesize a response when the live call fails
        local: Execution context is a local/dev host; skip the live call
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    local: bool = False

    @classmethod
    def from_host(cls, hostname: str, *, enabled: bool = True) -> FallbackPolicy:
        return cls(enabled=enabled, local=hostname.lower() in LOCAL_HOSTS)

    @classmethod
    def disabled(cls) -> FallbackPolicy:
        return cls(enabled=False, local=False)


# ─────────────────────────────────────────────────────────────────────────────
# Static Table
# ─────────────────────────────────────────────────────────────────────────────

MOCK_FLIGHTS: dict[str, FlightRecord] = {r.flight_number: r for r in (
    FlightRecord(
        flight_number="AA123", airline="American Airlines",
        departure_time="08:00 AM", arrival_time="11:30 AM", departure_date=MOCK_DATE,
        origin="JFK", origin_city="New York", destination="LAX", destination_city="Los Angeles",
        status="On Time", terminal="T8", gate="B4",
    ),
    FlightRecord(
        flight_number="DL456", airline="Delta Airlines",
        departure_time="09:15 AM", arrival_time="12:45 PM", departure_date=MOCK_DATE,
        origin="ATL", origin_city="Atlanta", destination="SFO", destination_city="San Francisco",
        status="Delayed", terminal="S", gate="A17", delay_minutes=45, estimated_arrival_time="01:30 PM",
    ),
    FlightRecord(
        flight_number="UA789", airline="United Airlines",
        departure_time="10:30 AM", arrival_time="01:15 PM", departure_date=MOCK_DATE,
        origin="ORD", origin_city="Chicago", destination="MIA", destination_city="Miami",
        status="On Time", terminal="T1", gate="C9",
    ),
)}


def _flight(**fields: Any) -> FlightRecord:
    try:
        return FlightRecord(**fields)
    except ValidationError as e:
        raise InvalidParamsError(f"Cannot build mock flight: {e.errors()[0]['msg']}", tool_name="fallback") from e


def _mock_date(requested: str | None) -> str:
    if requested:
        try:
            return date.fromisoformat(requested).isoformat()
        except ValueError:
            pass
    return MOCK_DATE


def placeholder_flight(flight_number: str, requested_date: str | None = None) -> FlightRecord:
    """Stand-in for a flight the table does not know."""
    return _flight(
        flight_number=flight_number, airline="Mock Airline",
        departure_time="10:00 AM", arrival_time="12:00 PM", departure_date=_mock_date(requested_date),
        origin="MCK", origin_city="Mock City", destination="TST", destination_city="Test City",
        status="On Time", terminal="T1", gate="G1",
    )


def placeholder_search(origin: str, destination: str, requested_date: str | None = None) -> FlightRecord:
    """Stand-in for a route search with no matches."""
    return _flight(
        flight_number="MOCK123", airline="Mock Airlines",
        departure_time="08:30 AM", arrival_time="10:45 AM", departure_date=_mock_date(requested_date),
        origin=origin or "MCK", origin_city="Mock City",
        destination=destination or "TST", destination_city="Test City",
        status="On Time", terminal="T1", gate="G1",
    )


def _mock_profile(**fields: Any) -> UserProfile:
    now = datetime.now(UTC)
    base = {
        "id": MOCK_USER_ID, "email": MOCK_EMAIL, "username": MOCK_USERNAME,
        "full_name": MOCK_FULL_NAME, "created_at": now, "updated_at": now,
    }
    return UserProfile(**{**base, **{k: v for k, v in fields.items() if v is not None}})


# ─────────────────────────────────────────────────────────────────────────────
# Resolver
# ─────────────────────────────────────────────────────────────────────────────

class FallbackResolver:
    """Answers any registered call from the static table.

    Raises ``MethodNotFoundError``/``InvalidParamsError`` for calls that are
    not well-formed; every well-formed call succeeds.
    """

    __slots__ = ("_flights",)

    def __init__(self, flights: dict[str, FlightRecord] | None = None) -> None:
        self._flights = MOCK_FLIGHTS if flights is None else flights

    @property
    def flights(self) -> dict[str, FlightRecord]:
        return dict(self._flights)

    def resolve(self, envelope: ToolCallEnvelope, *, reason: str = "local host") -> ToolCallResult:
        call = parse_call(envelope)
        log.warning(
            "using mock data; start the tool server for real data",
            call=envelope.describe(), reason=reason,
        )
        return ToolCallResult.of(self._payload(call), fallback=True)

    def _payload(self, call: Any) -> Any:
        match call:
            case GetFlightDetailsCall(arguments=args):
                number = normalize_flight_number(args.flight_number)
                record = self._flights.get(number) or placeholder_flight(number, args.date)
                return record.to_payload()
            case SearchFlightsCall(arguments=args):
                origin, destination = args.origin.upper(), args.destination.upper()
                matches = [
                    r for r in self._flights.values()
                    if r.origin == origin and r.destination == destination
                ] or [placeholder_search(origin, destination, args.date)]
                return [r.to_payload() for r in matches]
            case CreateUserCall(arguments=args):
                return CreateUserResult(
                    success=True, user_id=MOCK_USER_ID, email=args.email,
                    username=args.username or username_from_email(args.email),
                )
            case GetUserCall(arguments=args):
                return _mock_profile(id=args.user_id, email=args.email)
            case UpdateUserCall(arguments=args):
                return UpdateUserResult(success=True, user=_mock_profile(id=args.user_id, **args.changes()))
            case DeleteUserCall():
                return DeleteUserResult(success=True)
        raise MethodNotFoundError(f"No mock data for {type(call).__name__}")
