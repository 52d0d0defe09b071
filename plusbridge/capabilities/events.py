"""Application-level events (ready, pause/resume, network, keyboard ...).

Listeners are owned by the application rather than by a handle, so they
are bound under the fixed owner ``"app"``. The same function can be
removed with ``remove_event_listener`` whether it was added as a regular
or a once listener.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from plusbridge.capabilities.base import Capability, require_text
from plusbridge.core.errors import InvalidArgumentError
from plusbridge.core.normalizer import to_error
from plusbridge.core.waiting import wait_for_event
from plusbridge.models.listeners import ListenerBinding

logger = logging.getLogger(__name__)

APP_OWNER = "app"

EventType = MappingProxyType({
    "PLUS_READY": "plusready",
    "PAUSE": "pause",
    "RESUME": "resume",
    "NET_CHANGE": "netchange",
    "NEW_INTENT": "newintent",
    "PLUS_SCROLL_BOTTOM": "plusscrollbottom",
    "ERROR": "error",
    "BACKGROUND": "background",
    "FOREGROUND": "foreground",
    "TRIM_MEMORY": "trimmemory",
    "SPLASH_CLOSED": "splashclosed",
    "KEYBOARD_CHANGE": "keyboardchange",
    "UI_STYLE_CHANGE": "uistylechange",
})

NetworkType = MappingProxyType({
    "UNKNOWN": "unknown",
    "ETHERNET": "ethernet",
    "WIFI": "wifi",
    "CELLULAR_2G": "2g",
    "CELLULAR_3G": "3g",
    "CELLULAR_4G": "4g",
    "CELLULAR_5G": "5g",
    "NONE": "none",
})

EventsErrorCode = MappingProxyType({
    "INVALID_PARAMETER": 1,
    "UNSUPPORTED_EVENT": 2,
    "LISTENER_ERROR": 3,
    "TIMEOUT": 4,
    "UNKNOWN_ERROR": 99,
})

_EVENT_NAMES = MappingProxyType({
    "plusready": "Runtime ready",
    "pause": "Application paused",
    "resume": "Application resumed",
    "netchange": "Network state changed",
    "newintent": "New intent received",
    "plusscrollbottom": "Scrolled to bottom",
    "error": "Application error",
    "background": "Application moved to background",
    "foreground": "Application moved to foreground",
    "trimmemory": "Low memory warning",
    "splashclosed": "Splash screen closed",
    "keyboardchange": "Virtual keyboard changed",
    "uistylechange": "System UI style changed",
})

AppListener = Callable[[dict[str, Any]], Any]


def _normalize_app_event(payload: Any) -> dict[str, Any]:
    if isinstance(payload, Mapping):
        return dict(payload)
    if payload is None:
        return {}
    return {"data": payload}


class EventsCapability(Capability):
    """Application-wide event listeners."""

    namespace = "events"

    @staticmethod
    def is_event_type_supported(event_type: str) -> bool:
        return event_type in _EVENT_NAMES

    @staticmethod
    def get_event_type_name(event_type: str) -> str:
        """Human-readable description of *event_type*."""
        return _EVENT_NAMES.get(event_type, "Unknown event")

    def _check(self, event_type: Any, listener: Any = None, *, need_listener: bool = True) -> None:
        require_text(event_type, "Event type must be a non-empty string",
                     code=EventsErrorCode["INVALID_PARAMETER"])
        if not self.is_event_type_supported(event_type):
            raise InvalidArgumentError(
                f"Unsupported event type: {event_type}",
                code=EventsErrorCode["UNSUPPORTED_EVENT"],
            )
        if need_listener and not callable(listener):
            raise InvalidArgumentError(
                "Listener must be callable", code=EventsErrorCode["INVALID_PARAMETER"]
            )

    def _native_remove(self, binding: ListenerBinding) -> None:
        try:
            self._require().remove_event_listener(binding.event_type, binding.wrapped)
        except Exception as exc:
            logger.warning(
                "Removing app %s listener failed: %s", binding.event_type, exc
            )

    def _add(self, event_type: str, listener: AppListener, *, once: bool) -> None:
        self._check(event_type, listener)
        ns = self._require()
        wrapped = self._context.listeners.bind(
            APP_OWNER,
            event_type,
            listener,
            normalize_payload=_normalize_app_event,
            once=once,
            on_expire=self._native_remove if once else None,
        )
        try:
            ns.add_event_listener(event_type, wrapped)
        except Exception as exc:
            self._context.listeners.unbind(APP_OWNER, event_type, listener)
            raise to_error(
                exc, EventsErrorCode["LISTENER_ERROR"], f"Adding {event_type} listener failed"
            ) from exc

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_event_listener(self, event_type: str, listener: AppListener) -> None:
        """Register *listener* for *event_type*.

        Raises ``ListenerExistsError`` if the same function is already
        registered for that type.
        """
        self._add(event_type, listener, once=False)

    def add_once_event_listener(self, event_type: str, listener: AppListener) -> None:
        """Register *listener* for the next *event_type* event only."""
        self._add(event_type, listener, once=True)

    def remove_event_listener(self, event_type: str, listener: AppListener) -> None:
        """Remove *listener*; raises ``ListenerNotFoundError`` if it is not registered."""
        self._check(event_type, listener)
        ns = self._require()
        wrapped = self._context.listeners.unbind(APP_OWNER, event_type, listener)
        try:
            ns.remove_event_listener(event_type, wrapped)
        except Exception as exc:
            raise to_error(
                exc, EventsErrorCode["LISTENER_ERROR"], f"Removing {event_type} listener failed"
            ) from exc

    def remove_all_event_listeners(self, event_type: str | None = None) -> int:
        """Remove every app listener, or only those of *event_type*.

        Returns the number of listeners removed.
        """
        if event_type is not None:
            self._check(event_type, need_listener=False)
        removed = self._context.listeners.unbind_all(APP_OWNER, event_type)
        if removed and self._context.has_namespace(self.namespace):
            for binding in removed:
                self._native_remove(binding)
        return len(removed)

    def get_listener_count(self, event_type: str | None = None) -> int:
        return self._context.listeners.count(APP_OWNER, event_type)

    # ------------------------------------------------------------------
    # Waits
    # ------------------------------------------------------------------

    async def wait_for_event(
        self, event_type: str, timeout_ms: float | None = None
    ) -> dict[str, Any]:
        """Wait for the next *event_type* event; ``BridgeTimeoutError`` on deadline."""
        self._check(event_type, need_listener=False)
        ns = self._require()
        if timeout_ms is None:
            timeout_ms = self._context.config.default_wait_timeout_ms
        return await wait_for_event(
            self._context.listeners,
            APP_OWNER,
            event_type,
            add_listener=ns.add_event_listener,
            remove_listener=ns.remove_event_listener,
            timeout_ms=timeout_ms,
            normalize_payload=_normalize_app_event,
        )

    async def wait_for_ready(self, timeout_ms: float | None = None) -> dict[str, Any]:
        """Wait for ``plusready``."""
        return await self.wait_for_event(EventType["PLUS_READY"], timeout_ms)
