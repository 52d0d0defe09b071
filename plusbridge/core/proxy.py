"""Property proxy — forwards a fixed set of attributes to a live native handle.

Once the owning lifecycle is DESTROYED every forwarded access raises
``HandleDestroyedError`` instead of returning stale native state.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from plusbridge.core.errors import InvalidArgumentError, OperationFailedError
from plusbridge.core.lifecycle import ResourceLifecycle


class PropertyProxy:
    """Reads and writes pre-declared properties of *native*.

    Parameters
    ----------
    native:
        The native object whose attributes are forwarded.
    lifecycle:
        The owning handle's lifecycle; checked on every access.
    names:
        Property names that may be forwarded.
    read_only:
        Subset of *names* that may be read but not assigned.
    aliases:
        Optional mapping of exposed name -> native attribute name.
    """

    def __init__(
        self,
        native: Any,
        lifecycle: ResourceLifecycle,
        names: Iterable[str],
        *,
        read_only: Iterable[str] = (),
        aliases: dict[str, str] | None = None,
    ) -> None:
        self._native = native
        self._lifecycle = lifecycle
        self._names = tuple(dict.fromkeys(names))
        self._read_only = frozenset(read_only)
        self._aliases = dict(aliases or {})
        unknown = self._read_only.difference(self._names)
        if unknown:
            raise InvalidArgumentError(
                f"Read-only names not declared: {sorted(unknown)}"
            )

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def _native_name(self, name: str) -> str:
        if name not in self._names:
            raise InvalidArgumentError(f"Property {name!r} is not forwarded")
        return self._aliases.get(name, name)

    def _read(self, name: str, native_name: str) -> Any:
        try:
            return getattr(self._native, native_name)
        except AttributeError as exc:
            raise OperationFailedError(
                f"Native object has no property {native_name!r} (forwarded as {name!r})"
            ) from exc

    def get(self, name: str) -> Any:
        native_name = self._native_name(name)
        self._lifecycle.ensure_active(f"read {name!r} of")
        return self._read(name, native_name)

    def set(self, name: str, value: Any) -> None:
        native_name = self._native_name(name)
        if name in self._read_only:
            raise InvalidArgumentError(f"Property {name!r} is read-only")
        self._lifecycle.ensure_active(f"write {name!r} of")
        setattr(self._native, native_name, value)

    def snapshot(self) -> dict[str, Any]:
        """Every forwarded property as a plain dict."""
        self._lifecycle.ensure_active("read")
        return {
            name: self._read(name, self._aliases.get(name, name))
            for name in self._names
        }


class ForwardedProperty:
    """Descriptor exposing one ``PropertyProxy`` entry as an attribute.

    The owning class must provide a ``_proxy`` attribute::

        class VideoPlayer(NativeHandle):
            volume = ForwardedProperty()
            current_time = ForwardedProperty(native_name="currentTime")
    """

    def __init__(self, *, native_name: str | None = None, read_only: bool = False) -> None:
        self.native_name = native_name
        self.read_only = read_only
        self.attr = ""

    def __set_name__(self, owner: type, attr: str) -> None:
        self.attr = attr

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return obj._proxy.get(self.attr)

    def __set__(self, obj: Any, value: Any) -> None:
        obj._proxy.set(self.attr, value)


def forwarded_properties(cls: type) -> dict[str, ForwardedProperty]:
    """Collect every ``ForwardedProperty`` declared on *cls* and its bases."""
    found: dict[str, ForwardedProperty] = {}
    for klass in reversed(cls.__mro__):
        for attr, value in vars(klass).items():
            if isinstance(value, ForwardedProperty):
                found[attr] = value
    return found


def proxy_for(obj: Any, native: Any, lifecycle: ResourceLifecycle) -> PropertyProxy:
    """Build the ``PropertyProxy`` matching the descriptors on ``type(obj)``."""
    declared = forwarded_properties(type(obj))
    return PropertyProxy(
        native,
        lifecycle,
        declared,
        read_only=[name for name, prop in declared.items() if prop.read_only],
        aliases={
            name: prop.native_name
            for name, prop in declared.items()
            if prop.native_name
        },
    )
