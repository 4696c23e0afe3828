"""Flight record as carried in tool payloads.

Field names are snake_case in Python and camelCase on the wire
(``flightNumber``, ``departureTime``...), matching the flight-tracker backend.
"""

from __future__ import annotations

import re
from datetime import date
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Carrier code (2-4 alphanumerics) followed by 1-5 digits: AA123, B6101, MOCK123
FLIGHT_NUMBER_PATTERN = r"^[A-Z0-9]{2,4}\d{1,5}$"
_FLIGHT_NUMBER_RE = re.compile(FLIGHT_NUMBER_PATTERN)

AIRPORT_CODE_PATTERN = r"^[A-Z0-9]{2,5}$"
_AIRPORT_CODE_RE = re.compile(AIRPORT_CODE_PATTERN)

AirportCode = Annotated[str, Field(pattern=AIRPORT_CODE_PATTERN)]


class FlightStatus(StrEnum):
    ON_TIME = "On Time"
    DELAYED = "Delayed"
    CANCELLED = "Cancelled"
    SCHEDULED = "Scheduled"


def normalize_flight_number(value: str) -> str:
    """Strip and upper-case a flight number."""
    return value.strip().upper()


def is_flight_number(value: str) -> bool:
    return bool(_FLIGHT_NUMBER_RE.match(normalize_flight_number(value)))


def is_airport_code(value: str) -> bool:
    """Expects an already upper-cased code."""
    return bool(_AIRPORT_CODE_RE.match(value))


class FlightRecord(BaseModel):
    """One flight, keyed by ``flight_number``.

    ``delay_minutes`` is present exactly when the status is Delayed.
    The record is frozen: a flight number never changes once created.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
        json_schema_extra={
            "examples": [{
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
            }],
        },
    )

    flight_number: Annotated[str, Field(pattern=FLIGHT_NUMBER_PATTERN)]
    airline: Annotated[str, Field(min_length=1)]
    departure_time: str
    arrival_time: str
    departure_date: date
    origin: AirportCode
    origin_city: str
    destination: AirportCode
    destination_city: str
    status: FlightStatus
    terminal: str
    gate: str
    delay_minutes: NonNegativeInt | None = None
    estimated_arrival_time: str | None = None

    @field_validator("flight_number", mode="before")
    @classmethod
    def _normalize_number(cls, v: Any) -> Any:
        return normalize_flight_number(v) if isinstance(v, str) else v

    @model_validator(mode="after")
    def _delay_iff_delayed(self) -> FlightRecord:
        delayed = self.status is FlightStatus.DELAYED
        if delayed and self.delay_minutes is None:
            raise ValueError(f"{self.flight_number}: delayMinutes is required when status is Delayed")
        if not delayed and self.delay_minutes is not None:
            raise ValueError(f"{self.flight_number}: delayMinutes is only allowed when status is Delayed")
        return self

    def to_payload(self) -> dict[str, Any]:
        """Wire form: camelCase keys, JSON-native values, absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
