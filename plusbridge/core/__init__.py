"""Adapter core — errors, registries, listener identity, dual-mode calls.

Modules
-------
errors
    ``BridgeError`` hierarchy, one class per ``ErrorKind``.
normalizer
    ``normalize()`` / ``to_error()`` fold native failures into ``{code, message}``.
registry
    ``HandleRegistry`` tracks live native objects per kind.
identity
    ``CallbackIdentityMap`` lets callers remove listeners by original function.
adapter
    ``DualModeAdapter`` exposes callback-or-awaitable bridge calls.
proxy
    ``PropertyProxy`` forwards attributes to a live native handle.
lifecycle
    ``ResourceLifecycle`` Created -> Active -> Destroyed state machine.
waiting
    ``wait_for_event()`` deadline races that never leak listeners.
"""

from plusbridge.core.adapter import CallStyle, DualModeAdapter, PendingOperation
from plusbridge.core.errors import (
    BridgeError,
    BridgeTimeoutError,
    EnvironmentUnavailableError,
    HandleDestroyedError,
    HandleNotFoundError,
    InvalidArgumentError,
    InvalidTransitionError,
    ListenerExistsError,
    ListenerNotFoundError,
    NotFoundError,
    OperationFailedError,
    UnknownBridgeError,
)
from plusbridge.core.identity import CallbackIdentityMap
from plusbridge.core.lifecycle import ResourceLifecycle
from plusbridge.core.normalizer import normalize, to_error
from plusbridge.core.proxy import ForwardedProperty, PropertyProxy
from plusbridge.core.registry import Handle, HandleRegistry
from plusbridge.core.waiting import wait_for_event

__all__ = [
    "BridgeError",
    "BridgeTimeoutError",
    "CallStyle",
    "CallbackIdentityMap",
    "DualModeAdapter",
    "EnvironmentUnavailableError",
    "ForwardedProperty",
    "Handle",
    "HandleDestroyedError",
    "HandleNotFoundError",
    "HandleRegistry",
    "InvalidArgumentError",
    "InvalidTransitionError",
    "ListenerExistsError",
    "ListenerNotFoundError",
    "NotFoundError",
    "OperationFailedError",
    "PendingOperation",
    "PropertyProxy",
    "ResourceLifecycle",
    "UnknownBridgeError",
    "normalize",
    "to_error",
    "wait_for_event",
]
