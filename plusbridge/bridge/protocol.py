"""Structural shape of the native bridge this package consumes.

Nothing here is enforced at runtime; the protocols document what the
adapter layer expects from the host so fakes and real bindings agree.

* The bridge exposes one attribute per capability namespace
  (``bridge.native_obj``, ``bridge.video`` ...). A missing attribute or a
  ``None`` value means the capability is unavailable.
* Asynchronous namespace methods take ``(*args, success, error)`` and
  report exactly through one of the two callbacks.
* Native objects that emit events expose ``add_event_listener(event, fn)``
  and ``remove_event_listener(event, fn)``; removal matches by identity.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class EventSource(Protocol):
    """A native object that accepts event listeners."""

    def add_event_listener(self, event: str, listener: Callable[..., Any]) -> Any: ...

    def remove_event_listener(self, event: str, listener: Callable[..., Any]) -> Any: ...


class Bridge(Protocol):
    """The ambient host object. Namespaces are looked up by attribute name."""

    def __getattr__(self, namespace: str) -> Any: ...
