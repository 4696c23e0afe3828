"""flight-tracker backend: flight lookup and route search over an in-memory table."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from flightforum.foundation.errors import MethodNotFoundError
from flightforum.models import FlightRecord
from flightforum.protocol import (
    GetFlightDetailsCall,
    SearchFlightsCall,
    ServerName,
    ToolCall,
    ToolCallResult,
)

from .base import ToolServer, not_found


class FlightTable:
    """Flights keyed by flight number, iterated in insertion order.

    ``put`` on an existing number replaces that entry in place, so the table
    always holds exactly one record per number and the later write wins.
    """

    __slots__ = ("_rows",)

    def __init__(self, records: Iterable[FlightRecord] = ()) -> None:
        self._rows: dict[str, FlightRecord] = {}
        for record in records:
            self.put(record)

    def put(self, record: FlightRecord) -> None:
        self._rows[record.flight_number] = record

    def get(self, flight_number: str) -> FlightRecord | None:
        return self._rows.get(flight_number)

    def search(self, origin: str, destination: str) -> list[FlightRecord]:
        """Exact, case-sensitive match on both airport codes."""
        return [r for r in self._rows.values() if r.origin == origin and r.destination == destination]

    def __iter__(self) -> Iterator[FlightRecord]:
        return iter(self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, flight_number: object) -> bool:
        return flight_number in self._rows


SAMPLE_FLIGHTS: tuple[FlightRecord, ...] = tuple(FlightRecord.model_validate(row) for row in (
    {
        "flightNumber": "AA123",
        "airline": "American Airlines",
        "departureTime": "10:00 AM",
        "arrivalTime": "01:30 PM",
        "departureDate": "2025-03-10",
        "origin": "JFK",
        "originCity": "New York",
        "destination": "LAX",
        "destinationCity": "Los Angeles",
        "status": "On Time",
        "terminal": "T4",
        "gate": "G12",
    },
    {
        "flightNumber": "DL456",
        "airline": "Delta Airlines",
        "departureTime": "11:45 AM",
        "arrivalTime": "02:15 PM",
        "departureDate": "2025-03-10",
        "origin": "SFO",
        "originCity": "San Francisco",
        "destination": "ATL",
        "destinationCity": "Atlanta",
        "status": "Delayed",
        "terminal": "T2",
        "gate": "G5",
        "delayMinutes": 30,
    },
    {
        "flightNumber": "UA789",
        "airline": "United Airlines",
        "departureTime": "08:30 AM",
        "arrivalTime": "11:45 AM",
        "departureDate": "2025-03-10",
        "origin": "ORD",
        "originCity": "Chicago",
        "destination": "DEN",
        "destinationCity": "Denver",
        "status": "On Time",
        "terminal": "T1",
        "gate": "G22",
    },
))


class FlightTrackerServer(ToolServer):
    """Answers ``get_flight_details`` and ``search_flights``.

    Example:
        >>> server = FlightTrackerServer()
        >>> result = await server.call_tool("get_flight_details", {"flightNumber": "AA123"})
        >>> result.payload()["gate"]
        'G12'
    """

    server_name = ServerName.FLIGHT_TRACKER

    def __init__(self, table: FlightTable | None = None) -> None:
        super().__init__()
        self.table = table if table is not None else FlightTable(SAMPLE_FLIGHTS)

    async def _dispatch(self, call: ToolCall) -> ToolCallResult:
        match call:
            case GetFlightDetailsCall(arguments=args):
                return self.get_flight_details(args.flight_number)
            case SearchFlightsCall(arguments=args):
                return self.search_flights(args.origin, args.destination)
            case _:
                raise MethodNotFoundError(f"{self.name} does not handle {call.tool_name}", tool_name=call.tool_name)

    def get_flight_details(self, flight_number: str) -> ToolCallResult:
        record = self.table.get(flight_number)
        if record is None:
            self._log.info("flight not found", flight_number=flight_number)
            return not_found("Flight not found")
        return ToolCallResult.of(record.to_payload())

    def search_flights(self, origin: str, destination: str) -> ToolCallResult:
        matches = self.table.search(origin.upper(), destination.upper())
        self._log.debug("flight search", origin=origin, destination=destination, matches=len(matches))
        return ToolCallResult.of([r.to_payload() for r in matches])
