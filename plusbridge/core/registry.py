"""Handle registry — tracks live native objects per kind.

Every native object created through a capability is registered here under
a generated id. The registry is the single place that knows which handles
are alive:

* ``get`` never returns a destroyed handle (destroyed entries are removed
  synchronously before teardown runs).
* ids are never reused, so a stale id can never resolve to a newer object.
* native teardown failures are logged and absorbed; removal always happens.
"""

from __future__ import annotations

import itertools
import logging
import secrets
import string
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from plusbridge.core.errors import HandleNotFoundError, InvalidArgumentError
from plusbridge.core.lifecycle import ResourceLifecycle
from plusbridge.models.handles import (
    DestroyReport,
    HandleInfo,
    HandleKind,
    HandleState,
)

logger = logging.getLogger(__name__)

Teardown = Callable[[Any], Any]

_BASE36 = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _kind_key(kind: HandleKind | str) -> str:
    key = kind.value if isinstance(kind, HandleKind) else str(kind)
    if not key:
        raise InvalidArgumentError("Handle kind must be a non-empty string")
    return key


def default_teardown(native: Any) -> None:
    """Release *native* via ``close()``, falling back to ``recycle()``."""
    for name in ("close", "recycle"):
        method = getattr(native, name, None)
        if callable(method):
            method()
            return


class Handle:
    """A registered native object plus its lifecycle.

    Handles are created by ``HandleRegistry.register`` only.
    """

    def __init__(
        self,
        handle_id: str,
        kind: str,
        native: Any,
        teardown: Teardown | None = None,
    ) -> None:
        self.id = handle_id
        self.kind = kind
        self.native = native
        self.created_at = datetime.now(timezone.utc)
        self.lifecycle = ResourceLifecycle(handle_id)
        self.teardown = teardown
        # Capability wrapper object, set by the wrapper itself
        self.owner: Any = None

    @property
    def state(self) -> HandleState:
        return self.lifecycle.state

    def info(self) -> HandleInfo:
        return HandleInfo(
            handle_id=self.id,
            kind=self.kind,
            state=self.state,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"Handle(id={self.id!r}, kind={self.kind!r}, state={self.state.value})"


class HandleRegistry:
    """Per-kind map of id -> live ``Handle``.

    Parameters
    ----------
    id_suffix_length:
        Number of random hex characters appended to generated ids.
    """

    def __init__(self, *, id_suffix_length: int = 6) -> None:
        self._handles: dict[str, dict[str, Handle]] = {}
        self._sequence = itertools.count(1)
        self._suffix_bytes = max(1, (id_suffix_length + 1) // 2)
        self._suffix_length = max(1, id_suffix_length)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _new_id(self, kind: str) -> str:
        stamp = _base36(time.time_ns() // 1_000_000)
        seq = next(self._sequence)
        suffix = secrets.token_hex(self._suffix_bytes)[: self._suffix_length]
        return f"{kind}-{stamp}-{seq}-{suffix}"

    def register(
        self,
        kind: HandleKind | str,
        native: Any,
        *,
        teardown: Teardown | None = None,
    ) -> str:
        """Track *native* under a new id and return the id.

        The handle is ACTIVE by the time the id is returned.
        """
        if native is None:
            raise InvalidArgumentError("Cannot register a missing native object")
        key = _kind_key(kind)
        handle_id = self._new_id(key)
        handle = Handle(handle_id, key, native, teardown)
        handle.lifecycle.activate()
        self._handles.setdefault(key, {})[handle_id] = handle
        logger.debug("Registered %s handle %s.", key, handle_id)
        return handle_id

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, kind: HandleKind | str, handle_id: str) -> Handle | None:
        """Return the live handle, or ``None`` on a miss."""
        return self._handles.get(_kind_key(kind), {}).get(handle_id)

    def require(self, kind: HandleKind | str, handle_id: str) -> Handle:
        """Like ``get`` but raises ``HandleNotFoundError`` on a miss."""
        handle = self.get(kind, handle_id)
        if handle is None:
            raise HandleNotFoundError(
                f"No live {_kind_key(kind)} handle with id {handle_id!r}"
            )
        return handle

    def contains(self, kind: HandleKind | str, handle_id: str) -> bool:
        return self.get(kind, handle_id) is not None

    def count(self, kind: HandleKind | str) -> int:
        return len(self._handles.get(_kind_key(kind), {}))

    def ids(self, kind: HandleKind | str) -> list[str]:
        """Ids of every live handle of *kind*, in registration order."""
        return list(self._handles.get(_kind_key(kind), {}))

    def handles(self, kind: HandleKind | str) -> list[Handle]:
        return list(self._handles.get(_kind_key(kind), {}).values())

    def kinds(self) -> list[str]:
        """Kinds that currently have at least one live handle."""
        return [kind for kind, entries in self._handles.items() if entries]

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def release(self, kind: HandleKind | str, handle_id: str) -> Handle | None:
        """Remove and mark a handle DESTROYED without running native teardown.

        Used when the caller has already driven native teardown itself.
        Returns the released handle, or ``None`` if it was not registered.
        """
        handle = self._handles.get(_kind_key(kind), {}).pop(handle_id, None)
        if handle is None:
            return None
        handle.lifecycle.destroy()
        logger.debug("Released %s handle %s.", handle.kind, handle_id)
        return handle

    def _run_teardown(self, handle: Handle) -> Exception | None:
        teardown = handle.teardown or default_teardown
        try:
            teardown(handle.native)
        except Exception as exc:
            logger.warning(
                "Teardown of %s handle %s failed: %s", handle.kind, handle.id, exc
            )
            return exc
        return None

    def destroy(self, kind: HandleKind | str, handle_id: str) -> bool:
        """Destroy one handle.

        Returns ``False`` when nothing was registered under *handle_id*
        (including a second destroy of the same id).
        """
        handle = self.release(kind, handle_id)
        if handle is None:
            return False
        self._run_teardown(handle)
        return True

    def destroy_all(self, kind: HandleKind | str) -> DestroyReport:
        """Destroy every live handle of *kind*, continuing past failures."""
        key = _kind_key(kind)
        entries = self._handles.pop(key, {})
        destroyed: list[str] = []
        failures: dict[str, str] = {}
        for handle_id, handle in entries.items():
            handle.lifecycle.destroy()
            error = self._run_teardown(handle)
            destroyed.append(handle_id)
            if error is not None:
                failures[handle_id] = str(error) or type(error).__name__
        if destroyed:
            logger.info(
                "Destroyed %d %s handle(s) (%d teardown failure(s)).",
                len(destroyed),
                key,
                len(failures),
            )
        return DestroyReport(kind=key, destroyed=destroyed, failures=failures)

    def clear(self) -> list[DestroyReport]:
        """Destroy every handle of every kind."""
        return [self.destroy_all(kind) for kind in list(self._handles)]

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._handles.values())

    def __repr__(self) -> str:
        counts = ", ".join(
            f"{kind}={len(entries)}" for kind, entries in self._handles.items()
        )
        return f"HandleRegistry({counts})"
