"""Listener binding model — ties a caller's function to the wrapper the bridge sees."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict


class ListenerBinding(BaseModel):
    """One ``(original, wrapped, event_type, owner_id)`` tuple.

    ``original`` is the function the caller handed in; ``wrapped`` is the
    function actually registered with the native bridge. For a given
    ``(owner_id, event_type)`` pair each ``original`` appears at most once.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    owner_id: str
    event_type: str
    original: Callable[..., Any]
    wrapped: Callable[..., Any]
