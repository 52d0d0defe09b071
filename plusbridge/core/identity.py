"""Callback identity map — remove a listener by the function the caller gave us.

The bridge never sees the caller's listener. It sees a wrapper that
normalizes the native payload first. To remove the listener later the
caller hands back its *original* function; this map returns the exact
wrapper that was registered so it can be passed to the native
``remove_event_listener``.

Binding the same ``(owner_id, event_type, original)`` twice and unbinding
a triple that was never bound are both reported, never silently ignored:
either would otherwise leave an orphaned native registration behind.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from plusbridge.core.errors import (
    InvalidArgumentError,
    ListenerExistsError,
    ListenerNotFoundError,
)
from plusbridge.models.listeners import ListenerBinding

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]
PayloadNormalizer = Callable[[Any], Any]


class CallbackIdentityMap:
    """Maps caller listeners to the wrappers registered with the bridge.

    Parameters
    ----------
    propagate_listener_errors:
        When ``True`` an exception raised by a listener propagates out of the
        wrapper. By default it is logged, since the wrapper is called from
        inside the native bridge.
    """

    def __init__(self, *, propagate_listener_errors: bool = False) -> None:
        # (owner_id, event_type) -> {original -> binding}
        self._bindings: dict[tuple[str, str], dict[Listener, ListenerBinding]] = {}
        self._propagate = propagate_listener_errors

    @staticmethod
    def _validate(owner_id: str, event_type: str, original: Any) -> None:
        if not owner_id or not isinstance(owner_id, str):
            raise InvalidArgumentError("owner_id must be a non-empty string")
        if not event_type or not isinstance(event_type, str):
            raise InvalidArgumentError("event_type must be a non-empty string")
        if not callable(original):
            raise InvalidArgumentError("listener must be callable")

    def _make_wrapper(
        self,
        owner_id: str,
        event_type: str,
        original: Listener,
        normalize_payload: PayloadNormalizer | None,
        guard: Callable[[], bool] | None,
        once: bool,
        on_expire: Callable[[ListenerBinding], Any] | None,
    ) -> Listener:
        propagate = self._propagate

        def wrapped(*args: Any) -> Any:
            if guard is not None and not guard():
                logger.debug("Dropping late %s event for %s.", event_type, owner_id)
                return None
            if once:
                binding = self._expire(owner_id, event_type, original, wrapped)
                if binding is None:
                    return None
                if on_expire is not None:
                    on_expire(binding)
            payload = args[0] if args else None
            if normalize_payload is not None:
                payload = normalize_payload(payload)
            try:
                return original(payload)
            except Exception:
                if propagate:
                    raise
                logger.exception(
                    "Listener for %s on %s raised.", event_type, owner_id
                )
                return None

        wrapped.__name__ = f"wrapped_{getattr(original, '__name__', 'listener')}"
        wrapped.__qualname__ = wrapped.__name__
        return wrapped

    # ------------------------------------------------------------------
    # Bind / unbind
    # ------------------------------------------------------------------

    def bind(
        self,
        owner_id: str,
        event_type: str,
        original: Listener,
        *,
        normalize_payload: PayloadNormalizer | None = None,
        guard: Callable[[], bool] | None = None,
        once: bool = False,
        on_expire: Callable[[ListenerBinding], Any] | None = None,
    ) -> Listener:
        """Create and remember the wrapper for *original*.

        *guard* returning ``False`` makes the wrapper drop events. With
        *once* the binding removes itself on the first event and hands the
        expired binding to *on_expire* so the native side can be cleaned up.

        Raises
        ------
        ListenerExistsError
            If the triple is already bound.
        """
        self._validate(owner_id, event_type, original)
        slot = self._bindings.setdefault((owner_id, event_type), {})
        if original in slot:
            raise ListenerExistsError(
                f"Listener already exists for {event_type!r} on {owner_id!r}"
            )
        wrapped = self._make_wrapper(
            owner_id, event_type, original, normalize_payload, guard, once, on_expire
        )
        slot[original] = ListenerBinding(
            owner_id=owner_id,
            event_type=event_type,
            original=original,
            wrapped=wrapped,
        )
        return wrapped

    def unbind(self, owner_id: str, event_type: str, original: Listener) -> Listener:
        """Forget the binding and return the wrapper that ``bind`` created.

        Raises
        ------
        ListenerNotFoundError
            If the triple was never bound or was already unbound.
        """
        self._validate(owner_id, event_type, original)
        key = (owner_id, event_type)
        slot = self._bindings.get(key)
        if not slot or original not in slot:
            raise ListenerNotFoundError(
                f"No listener bound for {event_type!r} on {owner_id!r}"
            )
        binding = slot.pop(original)
        if not slot:
            del self._bindings[key]
        return binding.wrapped

    def _expire(
        self, owner_id: str, event_type: str, original: Listener, wrapped: Listener
    ) -> ListenerBinding | None:
        key = (owner_id, event_type)
        slot = self._bindings.get(key, {})
        binding = slot.get(original)
        if binding is None or binding.wrapped is not wrapped:
            return None
        del slot[original]
        if not slot:
            del self._bindings[key]
        return binding

    def unbind_all(
        self, owner_id: str, event_type: str | None = None
    ) -> list[ListenerBinding]:
        """Drop every binding of *owner_id* (optionally one event type only).

        Returns the removed bindings so their wrappers can be removed natively.
        """
        removed: list[ListenerBinding] = []
        for key in list(self._bindings):
            if key[0] != owner_id:
                continue
            if event_type is not None and key[1] != event_type:
                continue
            removed.extend(self._bindings.pop(key).values())
        return removed

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def lookup(
        self, owner_id: str, event_type: str, original: Listener
    ) -> Listener | None:
        """Return the wrapper for the triple without unbinding, or ``None``."""
        binding = self._bindings.get((owner_id, event_type), {}).get(original)
        return binding.wrapped if binding is not None else None

    def is_bound(self, owner_id: str, event_type: str, original: Listener) -> bool:
        return self.lookup(owner_id, event_type, original) is not None

    def bindings(self, owner_id: str) -> list[ListenerBinding]:
        return [
            binding
            for (owner, _), slot in self._bindings.items()
            if owner == owner_id
            for binding in slot.values()
        ]

    def count(self, owner_id: str | None = None, event_type: str | None = None) -> int:
        return sum(
            len(slot)
            for (owner, etype), slot in self._bindings.items()
            if (owner_id is None or owner == owner_id)
            and (event_type is None or etype == event_type)
        )
