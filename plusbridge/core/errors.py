"""Exception hierarchy for the adapter layer.

Every failure surfaced by plusbridge is a ``BridgeError`` carrying an
``ErrorKind`` and the normalized ``ErrorInfo`` (``code`` + ``message``).
Subclasses also inherit from the closest builtin so callers can catch
``ValueError``, ``LookupError`` or ``TimeoutError`` where that reads better.
"""

from __future__ import annotations

from plusbridge.models.errors import ERROR_CODES, ErrorInfo, ErrorKind


class BridgeError(RuntimeError):
    """Base class for every normalized bridge failure."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, *, code: int | None = None) -> None:
        if not message:
            message = self.kind.value.replace("_", " ")
        super().__init__(message)
        self.message = message
        self.code = ERROR_CODES[self.kind] if code is None else code

    @property
    def info(self) -> ErrorInfo:
        """The ``{code, message}`` payload of this error."""
        return ErrorInfo(code=self.code, message=self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code}, message={self.message!r})"


class EnvironmentUnavailableError(BridgeError):
    """The bridge, or the namespace a call needs, is not present."""

    kind = ErrorKind.ENVIRONMENT_UNAVAILABLE


class InvalidArgumentError(BridgeError, ValueError):
    """Caller input was malformed or missing."""

    kind = ErrorKind.INVALID_ARGUMENT


class NotFoundError(BridgeError, LookupError):
    """A lookup by id or by listener identity found nothing."""

    kind = ErrorKind.NOT_FOUND


class HandleNotFoundError(NotFoundError):
    """No live handle is registered under the requested id."""


class ListenerNotFoundError(NotFoundError):
    """The listener was never bound (or was already unbound)."""


class ListenerExistsError(BridgeError):
    """The same listener is already bound for this owner and event."""

    kind = ErrorKind.ALREADY_EXISTS


class OperationFailedError(BridgeError):
    """The native bridge reported a failure."""

    kind = ErrorKind.OPERATION_FAILED


class HandleDestroyedError(BridgeError):
    """An operation was attempted on a handle after teardown."""

    kind = ErrorKind.DESTROYED


class BridgeTimeoutError(BridgeError, TimeoutError):
    """A deadline elapsed before the expected event arrived."""

    kind = ErrorKind.TIMEOUT


class UnknownBridgeError(BridgeError):
    """Catch-all; always carries the original message."""

    kind = ErrorKind.UNKNOWN


class InvalidTransitionError(RuntimeError):
    """Raised when a requested lifecycle transition is not valid."""


ERROR_CLASSES: dict[ErrorKind, type[BridgeError]] = {
    ErrorKind.ENVIRONMENT_UNAVAILABLE: EnvironmentUnavailableError,
    ErrorKind.INVALID_ARGUMENT: InvalidArgumentError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.ALREADY_EXISTS: ListenerExistsError,
    ErrorKind.OPERATION_FAILED: OperationFailedError,
    ErrorKind.DESTROYED: HandleDestroyedError,
    ErrorKind.TIMEOUT: BridgeTimeoutError,
    ErrorKind.UNKNOWN: UnknownBridgeError,
}
