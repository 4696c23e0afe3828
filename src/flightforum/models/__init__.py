"""Typed records exchanged through the tool protocol."""

from .flight import (
    AIRPORT_CODE_PATTERN,
    FLIGHT_NUMBER_PATTERN,
    FlightRecord,
    FlightStatus,
    is_airport_code,
    is_flight_number,
    normalize_flight_number,
)
from .user import (
    CreateUserResult,
    DeleteUserResult,
    SoftMiss,
    UpdateUserResult,
    UserProfile,
    username_from_email,
)

__all__ = [
    "AIRPORT_CODE_PATTERN", "FLIGHT_NUMBER_PATTERN", "FlightRecord", "FlightStatus",
    "is_airport_code", "is_flight_number", "normalize_flight_number",
    "SoftMiss", "UserProfile", "CreateUserResult", "UpdateUserResult", "DeleteUserResult", "username_from_email",
]
