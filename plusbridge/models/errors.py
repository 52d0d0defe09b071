"""Normalized error payloads and the error taxonomy shared by every capability."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    """The eight categories every bridge failure is sorted into."""

    ENVIRONMENT_UNAVAILABLE = "environment_unavailable"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    OPERATION_FAILED = "operation_failed"
    DESTROYED = "destroyed"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


# Default numeric code for each kind. Capabilities may report their own codes
# through ErrorInfo; these are used when nothing better is known.
ERROR_CODES = MappingProxyType({
    ErrorKind.ENVIRONMENT_UNAVAILABLE: 1,
    ErrorKind.INVALID_ARGUMENT: 2,
    ErrorKind.NOT_FOUND: 3,
    ErrorKind.ALREADY_EXISTS: 4,
    ErrorKind.OPERATION_FAILED: 5,
    ErrorKind.DESTROYED: 6,
    ErrorKind.TIMEOUT: 7,
    ErrorKind.UNKNOWN: 99,
})

UNKNOWN_ERROR_CODE = ERROR_CODES[ErrorKind.UNKNOWN]
UNKNOWN_ERROR_MESSAGE = "Unknown error"


class ErrorInfo(BaseModel):
    """The uniform ``{code, message}`` shape handed to error callbacks."""

    model_config = ConfigDict(frozen=True)

    code: int
    message: str = Field(min_length=1)
