"""Foundation layer: configuration and error types shared by every module."""

from .config import FlightForumSettings, clear_settings_cache, get_settings
from .errors import (
    ErrorCode,
    InternalError,
    InvalidParamsError,
    MethodNotFoundError,
    ToolError,
    ToolException,
    TransportError,
)

__all__ = [
    "FlightForumSettings", "get_settings", "clear_settings_cache",
    "ErrorCode", "ToolError", "ToolException",
    "InvalidParamsError", "MethodNotFoundError", "InternalError", "TransportError",
]
