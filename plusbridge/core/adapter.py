"""Dual-mode adapter — one bridge call, two calling conventions.

Native bridge methods follow ``method(*args, success, error)``. An adapted
call accepts the same positional arguments plus keyword-only ``success`` and
``error`` callbacks:

* ``success`` supplied: callback style. The call returns ``None`` and
  exactly one of ``success`` / ``error`` fires, exactly once.
* ``success`` omitted: awaitable style. The call returns an
  ``asyncio.Future`` bound to the running loop that resolves with the
  success value or fails with a normalized ``BridgeError``.

A synchronous exception from the bridge (including a missing bridge or
namespace) is routed through the same single failure path; it never
escapes the adapter.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, overload

from plusbridge.core.errors import (
    BridgeError,
    HandleDestroyedError,
    UnknownBridgeError,
)
from plusbridge.core.normalizer import to_error
from plusbridge.models.errors import UNKNOWN_ERROR_CODE, ErrorKind

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], Any]
ErrorCallback = Callable[[BridgeError], Any]


class CallStyle(str, Enum):
    """How the caller asked for the result."""

    CALLBACK = "callback"
    AWAITABLE = "awaitable"


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class PendingOperation:
    """One in-flight adapted call; settles at most once.

    Parameters
    ----------
    name:
        Label for log messages, e.g. ``"video.create_video_player"``.
    on_success / on_error:
        Callback-style targets. Mutually exclusive with *future*.
    future:
        Awaitable-style target.
    discard:
        Receives a success value that arrives after *future* was cancelled.
    """

    def __init__(
        self,
        name: str,
        *,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
        future: asyncio.Future | None = None,
        fallback_code: int = UNKNOWN_ERROR_CODE,
        fallback_message: str = "",
        transform: Callable[[Any], Any] | None = None,
        guard: Callable[[], bool] | None = None,
        discard: Callable[[Any], Any] | None = None,
    ) -> None:
        self.name = name
        self.style = CallStyle.AWAITABLE if future is not None else CallStyle.CALLBACK
        self._on_success = on_success
        self._on_error = on_error
        self._future = future
        self._fallback_code = fallback_code
        self._fallback_message = fallback_message or f"{name} failed"
        self._transform = transform
        self._guard = guard
        self._discard = discard
        self._settled = False
        # Raised by the caller's own callback; never treated as a bridge failure
        self.callback_error: Exception | None = None

    @property
    def settled(self) -> bool:
        return self._settled

    # ------------------------------------------------------------------
    # Entry points handed to the native bridge
    # ------------------------------------------------------------------

    def succeed(self, value: Any = None) -> None:
        if self._claim():
            return
        if self._abandoned():
            self._discard_late(value)
            return
        if self._owner_gone():
            return
        if self._transform is not None:
            try:
                value = self._transform(value)
            except Exception as exc:
                self._deliver_error(
                    to_error(exc, self._fallback_code, self._fallback_message,
                             kind=ErrorKind.UNKNOWN)
                )
                return
        self._deliver_value(value)

    def fail(self, raw: Any = None, *, kind: ErrorKind = ErrorKind.OPERATION_FAILED) -> None:
        if self._claim():
            return
        if self._owner_gone():
            return
        self._deliver_error(
            to_error(raw, self._fallback_code, self._fallback_message, kind=kind)
        )

    def raised(self, exc: Exception) -> None:
        """Route a synchronous exception from the bridge call.

        A ``BridgeError`` keeps its kind; anything else becomes UNKNOWN.
        """
        self.fail(exc, kind=ErrorKind.UNKNOWN)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _claim(self) -> bool:
        """Mark settled; return ``True`` if it already was."""
        if self._settled:
            logger.debug("%s: ignoring duplicate native settlement.", self.name)
            return True
        self._settled = True
        return False

    def _abandoned(self) -> bool:
        """The awaiting caller cancelled before the bridge answered."""
        return self._future is not None and self._future.done()

    def _discard_late(self, value: Any) -> None:
        logger.debug("%s: result arrived after cancellation; discarding.", self.name)
        if self._discard is None:
            return
        try:
            self._discard(value)
        except Exception as exc:
            logger.warning("%s: releasing late result failed: %s", self.name, exc)

    def _owner_gone(self) -> bool:
        if self._guard is None or self._guard():
            return False
        if self.style is CallStyle.CALLBACK:
            logger.debug("%s: owner destroyed while pending; dropping result.", self.name)
            return True
        self._deliver_error(
            HandleDestroyedError(f"{self.name}: handle destroyed while pending")
        )
        return True

    def _deliver_value(self, value: Any) -> None:
        if self._future is not None:
            self._settle_future(value, None)
            return
        if self._on_success is not None:
            self._call_back(self._on_success, value)

    def _deliver_error(self, error: BridgeError) -> None:
        if self._future is not None:
            self._settle_future(None, error)
            return
        if self._on_error is not None:
            self._call_back(self._on_error, error)
        else:
            logger.warning("%s failed with no error callback: %s", self.name, error)

    def _call_back(self, callback: Callable[[Any], Any], value: Any) -> None:
        try:
            callback(value)
        except Exception as exc:
            self.callback_error = exc
            raise

    def _settle_future(self, value: Any, error: BridgeError | None) -> None:
        future = self._future
        assert future is not None

        def settle() -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(value)

        loop = future.get_loop()
        if _running_loop() is loop:
            settle()
        else:
            loop.call_soon_threadsafe(settle)


def resolved(
    value: Any = None, *, success: SuccessCallback | None = None
) -> asyncio.Future | None:
    """Deliver an already-known result in whichever style the caller used.

    Used for idempotent no-ops (e.g. closing a handle twice) that must keep
    the dual-mode return contract without touching the bridge.
    """
    if callable(success):
        success(value)
        return None
    loop = _running_loop()
    if loop is None:
        raise UnknownBridgeError(
            "awaitable style needs a running event loop; pass success= to use callback style"
        )
    future = loop.create_future()
    future.set_result(value)
    return future


class DualModeAdapter:
    """Wraps a raw ``(*args, success, error)`` bridge callable.

    Parameters
    ----------
    resolve:
        Zero-argument callable returning the raw bridge method. Called on
        every invocation so a bridge installed later is picked up and a
        missing one fails inside the adapter.
    name:
        Label used in messages and logs.
    fallback_code / fallback_message:
        Used when the native failure carries no code or message.
    transform:
        Applied to the success value before delivery (e.g. register the
        native object and wrap it in a handle class).
    guard:
        Returns ``False`` once the owning handle is gone; late results are
        then dropped (callback style) or rejected as destroyed (awaitable).
    discard:
        Receives a success value that arrives after the awaiting caller
        cancelled, so the native object it carries can be released.
    """

    def __init__(
        self,
        resolve: Callable[[], Callable[..., Any]],
        *,
        name: str = "bridge call",
        fallback_code: int = UNKNOWN_ERROR_CODE,
        fallback_message: str = "",
        transform: Callable[[Any], Any] | None = None,
        guard: Callable[[], bool] | None = None,
        discard: Callable[[Any], Any] | None = None,
    ) -> None:
        self._resolve = resolve
        self.name = name
        self._fallback_code = fallback_code
        self._fallback_message = fallback_message
        self._transform = transform
        self._guard = guard
        self._discard = discard

    @overload
    def __call__(
        self, *args: Any, success: SuccessCallback, error: ErrorCallback | None = ...
    ) -> None: ...

    @overload
    def __call__(
        self, *args: Any, success: None = ..., error: None = ...
    ) -> asyncio.Future: ...

    def __call__(
        self,
        *args: Any,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
    ) -> asyncio.Future | None:
        if callable(success):
            op = self._pending(on_success=success, on_error=error)
            self._invoke(op, args)
            return None

        loop = _running_loop()
        if loop is None:
            raise UnknownBridgeError(
                f"{self.name}: awaitable style needs a running event loop; "
                "pass success= to use callback style"
            )
        future = loop.create_future()
        op = self._pending(future=future)
        self._invoke(op, args)
        return future

    def _pending(self, **targets: Any) -> PendingOperation:
        return PendingOperation(
            self.name,
            fallback_code=self._fallback_code,
            fallback_message=self._fallback_message,
            transform=self._transform,
            guard=self._guard,
            discard=self._discard,
            **targets,
        )

    def _invoke(self, op: PendingOperation, args: tuple[Any, ...]) -> None:
        try:
            raw = self._resolve()
            raw(*args, op.succeed, op.fail)
        except Exception as exc:
            if exc is op.callback_error:
                raise
            if op.settled:
                logger.debug("%s: bridge raised after settling: %s", self.name, exc)
                return
            op.raised(exc)
            return
        logger.debug("%s dispatched (%s).", self.name, op.style.value)
