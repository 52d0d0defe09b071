"""Shared skeleton for every capability wrapper.

``Capability``
    One bridge namespace. Knows whether it is supported, builds handle
    wrappers for freshly created native objects, and offers the bulk
    count / ids / close-all operations over its handle kinds.
``NativeHandle``
    Composition wrapper around one registered native object. Holds the
    registry ``Handle`` (never mutates the native object), forwards declared
    properties through a ``PropertyProxy``, and routes listeners through the
    context's ``CallbackIdentityMap``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar, TypeVar

from plusbridge.bridge.protocol import EventSource
from plusbridge.context import BridgeContext
from plusbridge.core.adapter import (
    DualModeAdapter,
    ErrorCallback,
    SuccessCallback,
    resolved,
)
from plusbridge.core.errors import (
    HandleDestroyedError,
    InvalidArgumentError,
    OperationFailedError,
)
from plusbridge.core.normalizer import to_error
from plusbridge.core.proxy import proxy_for
from plusbridge.core.registry import Handle, default_teardown
from plusbridge.core.waiting import reject_waiters, wait_for_event
from plusbridge.models.errors import UNKNOWN_ERROR_CODE, ErrorKind
from plusbridge.models.handles import DestroyReport, HandleKind, HandleState

logger = logging.getLogger(__name__)

H = TypeVar("H", bound="NativeHandle")


def require_text(value: Any, message: str, *, code: int = UNKNOWN_ERROR_CODE) -> str:
    """Validate a non-empty string argument before any bridge call."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(message, code=code)
    return value


def require_mapping(value: Any, message: str, *, code: int = UNKNOWN_ERROR_CODE) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidArgumentError(message, code=code)
    return dict(value)


def require_positive(value: Any, message: str, *, code: int = UNKNOWN_ERROR_CODE) -> float:
    # "not > 0" also rejects NaN
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
        raise InvalidArgumentError(message, code=code)
    return value


class NativeHandle:
    """Base wrapper for one handle-backed native object."""

    kind: ClassVar[HandleKind]
    error_code: ClassVar[int] = UNKNOWN_ERROR_CODE

    def __init__(self, context: BridgeContext, handle: Handle) -> None:
        self._context = context
        self._handle = handle
        self._proxy = proxy_for(self, handle.native, handle.lifecycle)
        self._waiters: set[asyncio.Future] = set()
        handle.teardown = self._teardown
        handle.owner = self

    # ------------------------------------------------------------------
    # Identity and state
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._handle.id

    @property
    def state(self) -> HandleState:
        return self._handle.state

    @property
    def is_destroyed(self) -> bool:
        return self._handle.lifecycle.is_destroyed

    @property
    def handle(self) -> Handle:
        return self._handle

    def properties(self) -> dict[str, Any]:
        """All forwarded properties; raises once destroyed."""
        return self._proxy.snapshot()

    def _native(self, action: str = "use") -> Any:
        self._handle.lifecycle.ensure_active(action)
        return self._handle.native

    def _is_live(self) -> bool:
        return self._context.registry.get(self.kind, self.id) is self._handle

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _call(self, method: str, *args: Any, action: str | None = None) -> Any:
        """Synchronous native call; native failures become OperationFailedError."""
        native = self._native(action or method)
        try:
            return getattr(native, method)(*args)
        except Exception as exc:
            raise to_error(
                exc, self.error_code, f"{method} failed", kind=ErrorKind.OPERATION_FAILED
            ) from exc

    def _adapter(
        self,
        method: str,
        *,
        fallback_code: int | None = None,
        fallback_message: str = "",
        transform: Callable[[Any], Any] | None = None,
    ) -> DualModeAdapter:
        """Dual-mode adapter for ``native.<method>`` guarded by this handle's liveness."""
        native = self._native(method)

        def resolve() -> Callable[..., Any]:
            fn = getattr(native, method, None)
            if not callable(fn):
                raise OperationFailedError(
                    f"{self.kind.value}.{method} is not supported by this bridge",
                    code=self.error_code,
                )
            return fn

        return DualModeAdapter(
            resolve,
            name=f"{self.kind.value}.{method}",
            fallback_code=self.error_code if fallback_code is None else fallback_code,
            fallback_message=fallback_message,
            transform=transform,
            guard=self._is_live,
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def _normalize_event(self, payload: Any) -> dict[str, Any]:
        if isinstance(payload, Mapping):
            event = dict(payload)
        elif payload is None:
            event = {}
        else:
            event = {
                key: getattr(payload, key)
                for key in ("type", "code", "message")
                if hasattr(payload, key)
            }
            if not event:
                event = {"data": payload}
        event.setdefault("target", self.id)
        return event

    def _event_source(self, action: str) -> EventSource:
        native = self._native(action)
        if not isinstance(native, EventSource):
            raise OperationFailedError(
                f"{self.kind.value} does not emit events", code=self.error_code
            )
        return native

    def add_event_listener(self, event: str, listener: Callable[[dict[str, Any]], Any]) -> None:
        """Register *listener*; the native object receives a wrapper."""
        require_text(event, "event must be a non-empty string", code=self.error_code)
        source = self._event_source("add a listener to")
        wrapped = self._context.listeners.bind(
            self.id,
            event,
            listener,
            normalize_payload=self._normalize_event,
            guard=self._is_live,
        )
        try:
            source.add_event_listener(event, wrapped)
        except Exception as exc:
            self._context.listeners.unbind(self.id, event, listener)
            raise to_error(exc, self.error_code, f"Adding {event} listener failed") from exc

    def remove_event_listener(self, event: str, listener: Callable[[dict[str, Any]], Any]) -> None:
        """Remove *listener* using the same function passed to ``add_event_listener``.

        Raises ``ListenerNotFoundError`` if it was never added.
        """
        require_text(event, "event must be a non-empty string", code=self.error_code)
        source = self._event_source("remove a listener from")
        wrapped = self._context.listeners.unbind(self.id, event, listener)
        try:
            source.remove_event_listener(event, wrapped)
        except Exception as exc:
            raise to_error(exc, self.error_code, f"Removing {event} listener failed") from exc

    def listener_count(self, event: str | None = None) -> int:
        return self._context.listeners.count(self.id, event)

    async def wait_for_event(
        self,
        event: str,
        timeout_ms: float | None = None,
        *,
        predicate: Callable[[dict[str, Any]], bool] | None = None,
    ) -> dict[str, Any]:
        """Wait for the next *event*.

        Raises ``BridgeTimeoutError`` on deadline and ``HandleDestroyedError``
        if the handle is destroyed or closed first.
        """
        require_text(event, "event must be a non-empty string", code=self.error_code)
        source = self._event_source("wait on")
        if timeout_ms is None:
            timeout_ms = self._context.config.default_wait_timeout_ms
        return await wait_for_event(
            self._context.listeners,
            self.id,
            event,
            add_listener=source.add_event_listener,
            remove_listener=source.remove_event_listener,
            timeout_ms=timeout_ms,
            predicate=predicate,
            normalize_payload=self._normalize_event,
            waiters=self._waiters,
        )

    def _reject_waits(self) -> None:
        count = reject_waiters(
            self._waiters,
            lambda: HandleDestroyedError(f"{self.id} destroyed while waiting for an event"),
        )
        if count:
            logger.debug("Rejected %d pending wait(s) on %s.", count, self.id)

    def _drop_listeners(self, native: Any) -> None:
        for binding in self._context.listeners.unbind_all(self.id):
            try:
                native.remove_event_listener(binding.event_type, binding.wrapped)
            except Exception as exc:
                logger.warning(
                    "Removing %s listener from %s failed: %s",
                    binding.event_type,
                    self.id,
                    exc,
                )

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _release_native(self, native: Any) -> None:
        """Native teardown; subclasses override for recycle()/close() variants."""
        default_teardown(native)

    def _teardown(self, native: Any) -> None:
        self._reject_waits()
        if isinstance(native, EventSource):
            self._drop_listeners(native)
        self._release_native(native)

    def destroy(self) -> None:
        """Tear down the native object. Calling it again is a no-op."""
        self._context.registry.destroy(self.kind, self.id)

    def _close_async(
        self,
        method: str = "close",
        *,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
        fallback_message: str = "",
    ) -> asyncio.Future | None:
        """Dual-mode native close.

        The handle leaves the registry immediately; the native close result
        is reported through the caller's chosen channel. Closing an already
        closed handle succeeds without touching the bridge.
        """
        if self.is_destroyed:
            return resolved(None, success=success)
        native = self._handle.native
        self._context.registry.release(self.kind, self.id)
        self._reject_waits()
        if isinstance(native, EventSource):
            self._drop_listeners(native)
        adapter = DualModeAdapter(
            lambda: getattr(native, method),
            name=f"{self.kind.value}.{method}",
            fallback_code=self.error_code,
            fallback_message=fallback_message or f"{method} failed",
        )
        return adapter(success=success, error=error)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, state={self.state.value})"


class Capability:
    """Base class for one bridge namespace."""

    namespace: ClassVar[str]

    def __init__(self, context: BridgeContext | None = None) -> None:
        self._context = context or BridgeContext()

    @property
    def context(self) -> BridgeContext:
        return self._context

    async def is_supported(self) -> bool:
        """``True`` when the bridge and this capability's namespace exist."""
        return self._context.has_namespace(self.namespace)

    def _require(self) -> Any:
        return self._context.namespace(self.namespace)

    def _wrap(self, cls: type[H], native: Any) -> H:
        """Register *native* and return its wrapper."""
        handle_id = self._context.registry.register(cls.kind, native)
        handle = self._context.registry.require(cls.kind, handle_id)
        return cls(self._context, handle)

    def _lookup(self, cls: type[H], handle_id: str) -> H | None:
        """Return the live wrapper registered under *handle_id*, or ``None``."""
        handle = self._context.registry.get(cls.kind, handle_id)
        if handle is None or not isinstance(handle.owner, cls):
            return None
        return handle.owner

    def _wrappers(self, cls: type[H]) -> list[H]:
        return [
            handle.owner
            for handle in self._context.registry.handles(cls.kind)
            if isinstance(handle.owner, cls)
        ]

    def _count(self, kind: HandleKind) -> int:
        return self._context.registry.count(kind)

    def _ids(self, kind: HandleKind) -> list[str]:
        return self._context.registry.ids(kind)

    def _close_all(self, kind: HandleKind) -> DestroyReport:
        return self._context.registry.destroy_all(kind)
