"""Unified error handling for flightforum.

- ErrorCode: protocol and transport error codes
- ToolError: structured, serializable error
- ToolException and its subclasses: the raised form of a ToolError
"""

from .errors import (
    PUBLIC_ERROR_MESSAGE,
    ErrorCode,
    InternalError,
    InvalidParamsError,
    MethodNotFoundError,
    ToolError,
    ToolException,
    TransportError,
)

__all__ = [
    "ErrorCode", "ToolError", "ToolException", "PUBLIC_ERROR_MESSAGE",
    "InvalidParamsError", "MethodNotFoundError", "InternalError", "TransportError",
]
