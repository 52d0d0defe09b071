"""plusbridge data models — Pydantic v2, frozen (immutable)."""

from plusbridge.models.errors import (
    ERROR_CODES,
    UNKNOWN_ERROR_CODE,
    UNKNOWN_ERROR_MESSAGE,
    ErrorInfo,
    ErrorKind,
)
from plusbridge.models.handles import (
    VALID_TRANSITIONS,
    DestroyReport,
    HandleInfo,
    HandleKind,
    HandleState,
    LifecycleTransition,
)
from plusbridge.models.listeners import ListenerBinding

__all__ = [
    # errors
    "ErrorKind",
    "ErrorInfo",
    "ERROR_CODES",
    "UNKNOWN_ERROR_CODE",
    "UNKNOWN_ERROR_MESSAGE",
    # handles
    "HandleKind",
    "HandleState",
    "HandleInfo",
    "LifecycleTransition",
    "DestroyReport",
    "VALID_TRANSITIONS",
    # listeners
    "ListenerBinding",
]
