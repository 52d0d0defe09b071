"""Event waits with a deadline.

A wait is a race between the expected event and a timer. Whichever side
wins, the temporary listener is unbound from the ``CallbackIdentityMap``
and removed from the native object, so the loser never leaks a binding.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from plusbridge.core.errors import BridgeTimeoutError, ListenerNotFoundError
from plusbridge.core.identity import CallbackIdentityMap, PayloadNormalizer

logger = logging.getLogger(__name__)


async def wait_for_event(
    listeners: CallbackIdentityMap,
    owner_id: str,
    event_type: str,
    *,
    add_listener: Callable[[str, Callable[..., Any]], Any],
    remove_listener: Callable[[str, Callable[..., Any]], Any],
    timeout_ms: float,
    predicate: Callable[[Any], bool] | None = None,
    normalize_payload: PayloadNormalizer | None = None,
    waiters: set[asyncio.Future] | None = None,
) -> Any:
    """Wait for the first *event_type* event on *owner_id*.

    Parameters
    ----------
    add_listener / remove_listener:
        Native registration functions taking ``(event_type, wrapper)``.
    timeout_ms:
        Deadline in milliseconds; ``<= 0`` waits indefinitely.
    predicate:
        Optional filter; events for which it returns ``False`` are ignored.
    waiters:
        Set the pending future is kept in while the wait runs, so the owner
        can fail it (see ``reject_waiters``) when it is destroyed.

    Raises
    ------
    BridgeTimeoutError
        If the deadline elapses first.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()
    if waiters is not None:
        waiters.add(future)

    def on_event(payload: Any) -> None:
        if future.done():
            return
        if predicate is not None and not predicate(payload):
            return
        future.set_result(payload)

    wrapped = listeners.bind(
        owner_id, event_type, on_event, normalize_payload=normalize_payload
    )
    try:
        add_listener(event_type, wrapped)
        if timeout_ms and timeout_ms > 0:
            return await asyncio.wait_for(future, timeout_ms / 1000)
        return await future
    except asyncio.TimeoutError:
        raise BridgeTimeoutError(
            f"Timed out after {timeout_ms:g}ms waiting for {event_type!r} on {owner_id!r}"
        ) from None
    finally:
        if waiters is not None:
            waiters.discard(future)
        try:
            wrapped = listeners.unbind(owner_id, event_type, on_event)
        except ListenerNotFoundError:
            # Owner destroyed mid-wait; its bindings were already dropped.
            logger.debug("Wait on %s/%s: binding already gone.", owner_id, event_type)
        else:
            try:
                remove_listener(event_type, wrapped)
            except Exception as exc:
                logger.warning(
                    "Removing temporary %s listener on %s failed: %s",
                    event_type,
                    owner_id,
                    exc,
                )


def reject_waiters(
    waiters: set[asyncio.Future], make_error: Callable[[], BaseException]
) -> int:
    """Fail every pending wait in *waiters* with a fresh *make_error()*; return how many."""
    rejected = 0
    for future in list(waiters):
        if future.done():
            continue
        error = make_error()
        loop = future.get_loop()
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            future.set_exception(error)
        else:
            loop.call_soon_threadsafe(_fail, future, error)
        rejected += 1
    waiters.clear()
    return rejected


def _fail(future: asyncio.Future, error: BaseException) -> None:
    if not future.done():
        future.set_exception(error)
