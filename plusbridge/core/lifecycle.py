"""Resource lifecycle state machine shared by every handle-backed object.

Enforces:
- Valid transitions only (VALID_TRANSITIONS table)
- DESTROYED is terminal; destroying twice is a no-op
- Every transition recorded in the handle's history
"""

from __future__ import annotations

from plusbridge.core.errors import HandleDestroyedError, InvalidTransitionError
from plusbridge.models.handles import (
    VALID_TRANSITIONS,
    HandleState,
    LifecycleTransition,
)


class ResourceLifecycle:
    """Created -> Active -> Destroyed for one native handle.

    Parameters
    ----------
    label:
        Human-readable name used in error messages (e.g. ``"bitmap-..."``).
    """

    def __init__(self, label: str = "handle") -> None:
        self._label = label
        self._state = HandleState.CREATED
        self._history: list[LifecycleTransition] = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def label(self) -> str:
        return self._label

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == HandleState.ACTIVE

    @property
    def is_destroyed(self) -> bool:
        return self._state == HandleState.DESTROYED

    @property
    def history(self) -> list[LifecycleTransition]:
        """A copy of every transition so far, oldest first."""
        return list(self._history)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, target: HandleState) -> LifecycleTransition:
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {self._label} from {self._state.value} "
                f"to {target.value}. Allowed: {sorted(s.value for s in allowed)}"
            )
        record = LifecycleTransition(from_state=self._state, to_state=target)
        self._state = target
        self._history.append(record)
        return record

    def activate(self) -> LifecycleTransition:
        """CREATED -> ACTIVE."""
        return self._transition(HandleState.ACTIVE)

    def destroy(self) -> bool:
        """Move to DESTROYED.

        Returns ``False`` (and does nothing) when already destroyed.
        """
        if self._state == HandleState.DESTROYED:
            return False
        self._transition(HandleState.DESTROYED)
        return True

    def ensure_active(self, action: str = "use") -> None:
        """Raise ``HandleDestroyedError`` unless the handle is still usable."""
        if self._state == HandleState.DESTROYED:
            raise HandleDestroyedError(
                f"Cannot {action} {self._label}: handle destroyed"
            )
        if self._state != HandleState.ACTIVE:
            raise InvalidTransitionError(
                f"Cannot {action} {self._label}: handle is {self._state.value}"
            )

    def __repr__(self) -> str:
        return f"ResourceLifecycle({self._label!r}, state={self._state.value})"
