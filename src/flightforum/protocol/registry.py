"""Fixed tool registry and closed dispatch over its calls.

Each registered tool has one params model and one call model. The call
models form a discriminated union on ``tool_name``, so adapters can
``match`` on a closed set of variants; anything outside the registry is
rejected with ``MethodNotFoundError`` before arguments are even looked at.

Example:
    >>> call = parse_call(ToolCallEnvelope(
    ...     server_name="flight-tracker", tool_name="search_flights",
    ...     arguments={"origin": "JFK", "destination": "LAX"},
    ... ))
    >>> isinstance(call, SearchFlightsCall)
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from flightforum.foundation.errors import InvalidParamsError, MethodNotFoundError

from .envelope import ServerName, ToolCallEnvelope, ToolName

NonEmpty = Annotated[str, Field(min_length=1)]


# ─────────────────────────────────────────────────────────────────────────────
# Parameter Schemas (wire names via aliases)
# ─────────────────────────────────────────────────────────────────────────────

class ToolParams(BaseModel):
    """Base for tool arguments. Unknown keys are ignored, like the backends do."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)

    def to_arguments(self) -> dict[str, Any]:
        """Arguments mapping using wire names; only keys that were set."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class GetFlightDetailsParams(ToolParams):
    flight_number: NonEmpty = Field(..., alias="flightNumber", description="Flight number (e.g., AA123)")
    date: str | None = Field(default=None, description="Flight date in YYYY-MM-DD format (optional)")


class SearchFlightsParams(ToolParams):
    origin: NonEmpty = Field(..., description="Origin airport code (e.g., JFK)")
    destination: NonEmpty = Field(..., description="Destination airport code (e.g., LAX)")
    date: str | None = Field(default=None, description="Flight date in YYYY-MM-DD format (optional)")


class CreateUserParams(ToolParams):
    email: NonEmpty = Field(..., description="User email address")
    password: NonEmpty = Field(..., description="User password (min 6 characters)")
    username: str | None = Field(default=None, description="Optional username for the user")
    full_name: str | None = Field(default=None, description="Optional full name for the user")


class GetUserParams(ToolParams):
    user_id: str | None = Field(default=None, alias="userId", description="User ID to fetch")
    email: str | None = Field(default=None, description="User email to fetch")

    @model_validator(mode="after")
    def _one_key(self) -> GetUserParams:
        if not self.user_id and not self.email:
            raise ValueError("Missing required parameter: userId or email")
        return self


class UpdateUserParams(ToolParams):
    user_id: NonEmpty = Field(..., alias="userId", description="User ID to update")
    username: str | None = Field(default=None, description="New username")
    full_name: str | None = Field(default=None, description="New full name")
    avatar_url: str | None = Field(default=None, description="New avatar URL")

    def changes(self) -> dict[str, Any]:
        """Profile fields explicitly supplied by the caller (None included)."""
        return {k: getattr(self, k) for k in ("username", "full_name", "avatar_url") if k in self.model_fields_set}


class DeleteUserParams(ToolParams):
    user_id: NonEmpty = Field(..., alias="userId", description="User ID to delete")


# ─────────────────────────────────────────────────────────────────────────────
# Call Variants (closed union)
# ─────────────────────────────────────────────────────────────────────────────

class _Call(BaseModel):
    model_config = ConfigDict(frozen=True)


class GetFlightDetailsCall(_Call):
    server_name: Literal["flight-tracker"] = "flight-tracker"
    tool_name: Literal["get_flight_details"] = "get_flight_details"
    arguments: GetFlightDetailsParams


class SearchFlightsCall(_Call):
    server_name: Literal["flight-tracker"] = "flight-tracker"
    tool_name: Literal["search_flights"] = "search_flights"
    arguments: SearchFlightsParams


class CreateUserCall(_Call):
    server_name: Literal["user-management"] = "user-management"
    tool_name: Literal["create_user"] = "create_user"
    arguments: CreateUserParams


class GetUserCall(_Call):
    server_name: Literal["user-management"] = "user-management"
    tool_name: Literal["get_user"] = "get_user"
    arguments: GetUserParams


class UpdateUserCall(_Call):
    server_name: Literal["user-management"] = "user-management"
    tool_name: Literal["update_user"] = "update_user"
    arguments: UpdateUserParams


class DeleteUserCall(_Call):
    server_name: Literal["user-management"] = "user-management"
    tool_name: Literal["delete_user"] = "delete_user"
    arguments: DeleteUserParams


FlightTrackerCall = GetFlightDetailsCall | SearchFlightsCall
UserManagementCall = CreateUserCall | GetUserCall | UpdateUserCall | DeleteUserCall

ToolCall = Annotated[
    GetFlightDetailsCall | SearchFlightsCall
    | CreateUserCall | GetUserCall | UpdateUserCall | DeleteUserCall,
    Field(discriminator="tool_name"),
]

_ToolCallAdapter: TypeAdapter[ToolCall] = TypeAdapter(ToolCall)


# ─────────────────────────────────────────────────────────────────────────────
# Registry
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Registry entry: what a tool is called, what it takes."""

    name: ToolName
    description: str
    params: type[ToolParams]

    @property
    def properties(self) -> dict[str, dict[str, object]]:
        props = self.params.model_json_schema(by_alias=True).get("properties", {})
        return {name: {k: v for k, v in prop.items() if k != "title"} for name, prop in props.items()}

    @property
    def required(self) -> list[str]:
        return list(self.params.model_json_schema(by_alias=True).get("required", []))

    def describe(self) -> dict[str, object]:
        """Tool listing entry (name, description, input schema)."""
        return {
            "name": self.name.value,
            "description": self.description,
            "inputSchema": {"type": "object", "properties": self.properties, "required": self.required},
        }


TOOL_REGISTRY: dict[ServerName, dict[ToolName, ToolSpec]] = {
    ServerName.FLIGHT_TRACKER: {
        ToolName.GET_FLIGHT_DETAILS: ToolSpec(
            ToolName.GET_FLIGHT_DETAILS, "Get flight details for a given flight number", GetFlightDetailsParams,
        ),
        ToolName.SEARCH_FLIGHTS: ToolSpec(
            ToolName.SEARCH_FLIGHTS, "Search for flights by origin and destination", SearchFlightsParams,
        ),
    },
    ServerName.USER_MANAGEMENT: {
        ToolName.CREATE_USER: ToolSpec(ToolName.CREATE_USER, "Creates a new user in the system", CreateUserParams),
        ToolName.GET_USER: ToolSpec(ToolName.GET_USER, "Get user details by ID or email", GetUserParams),
        ToolName.UPDATE_USER: ToolSpec(ToolName.UPDATE_USER, "Update user profile information", UpdateUserParams),
        ToolName.DELETE_USER: ToolSpec(ToolName.DELETE_USER, "Delete a user from the system", DeleteUserParams),
    },
}


def ensure_registered(server_name: str, tool_name: str) -> ToolSpec:
    """Look up a (server, tool) pair, raising MethodNotFoundError if it is not registered."""
    try:
        server = ServerName(server_name)
    except ValueError:
        raise MethodNotFoundError(f"Unknown server: {server_name}", tool_name=tool_name or "tool") from None
    for name, spec in TOOL_REGISTRY[server].items():
        if name.value == tool_name:
            return spec
    raise MethodNotFoundError(f"Unknown tool: {tool_name}", tool_name=tool_name or "tool")


def parse_call(envelope: ToolCallEnvelope) -> ToolCall:
    """Turn an envelope into its closed call variant.

    Raises:
        MethodNotFoundError: server/tool pair is not in the registry
        InvalidParamsError: arguments do not satisfy the tool's schema
    """
    ensure_registered(envelope.server_name, envelope.tool_name)
    try:
        return _ToolCallAdapter.validate_python(envelope.model_dump())
    except ValidationError as e:
        raise InvalidParamsError(format_params_error(e), tool_name=envelope.tool_name) from e


def format_params_error(e: ValidationError) -> str:
    """Summarize argument validation errors the way the backends word them."""
    missing: list[str] = []
    other: list[str] = []
    for err in e.errors():
        loc = [str(p) for p in err["loc"]]
        # Drop the union tag and the "arguments" container
        if "arguments" in loc:
            loc = loc[loc.index("arguments") + 1:]
        field = ".".join(loc)
        match err["type"]:
            case "missing" | "string_too_short":
                missing.append(field)
            case "value_error":
                other.append(str(err.get("ctx", {}).get("error", err["msg"])))
            case _:
                other.append(f"{field}: {err['msg']}" if field else err["msg"])
    parts = []
    if missing:
        parts.append(f"Missing required arguments: {' and '.join(missing)}")
    parts.extend(other)
    return "; ".join(parts) or "Invalid arguments"
