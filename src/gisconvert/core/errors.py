"""Error taxonomy for conversion requests.

Every failure that reaches a caller is one of the classes below. Each
carries the JSON-RPC error code the MCP adapter reports for it.
"""
from __future__ import annotations

from typing import Iterable, List

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND


class GisConversionError(Exception):
    """Base class for all normalized conversion errors."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownOperation(GisConversionError):
    """Raised when the requested operation name is not registered."""

    code = METHOD_NOT_FOUND

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class MissingParameter(GisConversionError):
    """Raised when one or more required arguments are absent or empty."""

    code = INVALID_PARAMS

    def __init__(self, fields: Iterable[str]):
        self.fields: List[str] = list(fields)
        noun = "parameter" if len(self.fields) == 1 else "parameters"
        super().__init__(f"Missing required {noun}: {', '.join(self.fields)}")


class InvalidParameter(GisConversionError):
    """Raised when an argument is present but malformed."""

    code = INVALID_PARAMS


class ConversionFailed(GisConversionError):
    """Raised when a conversion cannot produce a result."""

    code = INTERNAL_ERROR
