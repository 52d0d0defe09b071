"""Handle lifecycle models — kinds, states, transitions and bulk teardown reports."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class HandleKind(str, Enum):
    """Kinds of native objects tracked by a HandleRegistry.

    Registries also accept plain strings, so capabilities outside this list
    can still track their own handles.
    """

    BITMAP = "bitmap"
    VIEW = "view"
    IMAGE_SLIDER = "image_slider"
    CAMERA = "camera"
    ADDRESS_BOOK = "address_book"
    MAP = "map"
    WAITING_DIALOG = "waiting_dialog"
    VIDEO_PLAYER = "video_player"
    LIVE_PUSHER = "live_pusher"


class HandleState(str, Enum):
    """Strict lifecycle of a handle-backed object."""

    CREATED = "created"
    ACTIVE = "active"
    DESTROYED = "destroyed"


# Valid lifecycle transitions, enforced by ResourceLifecycle.
# DESTROYED is terminal.
VALID_TRANSITIONS: dict[HandleState, set[HandleState]] = {
    HandleState.CREATED: {HandleState.ACTIVE, HandleState.DESTROYED},
    HandleState.ACTIVE: {HandleState.DESTROYED},
    HandleState.DESTROYED: set(),
}


class LifecycleTransition(BaseModel):
    """Records a single lifecycle transition of one handle."""

    model_config = ConfigDict(frozen=True)

    from_state: HandleState
    to_state: HandleState
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class HandleInfo(BaseModel):
    """Point-in-time view of a registered handle."""

    model_config = ConfigDict(frozen=True)

    handle_id: str
    kind: str
    state: HandleState
    created_at: datetime


class DestroyReport(BaseModel):
    """Outcome of a bulk teardown.

    Every handle listed in ``destroyed`` has left the registry, including
    those whose native teardown failed; ``failures`` maps such ids to the
    failure message.
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    destroyed: list[str] = []
    failures: dict[str, str] = {}

    @property
    def ok(self) -> bool:
        return not self.failures
