"""One context plus every capability built on it.

Typical use::

    runtime = create_runtime()
    if await runtime.events.is_supported():
        await runtime.events.wait_for_ready()
    bitmap = runtime.native_obj.create_bitmap(64, 64)
"""

from __future__ import annotations

import logging
from typing import Any

from plusbridge.capabilities.base import Capability
from plusbridge.capabilities.events import EventsCapability
from plusbridge.capabilities.native_obj import NativeObjCapability
from plusbridge.capabilities.native_ui import NativeUICapability
from plusbridge.capabilities.video import VideoCapability
from plusbridge.config import BridgeConfig
from plusbridge.context import BridgeContext
from plusbridge.models.handles import DestroyReport

logger = logging.getLogger(__name__)


class Runtime:
    """Capabilities sharing a single ``BridgeContext``."""

    def __init__(self, context: BridgeContext) -> None:
        self.context = context
        self.native_obj = NativeObjCapability(context)
        self.video = VideoCapability(context)
        self.native_ui = NativeUICapability(context)
        self.events = EventsCapability(context)

    def capabilities(self) -> dict[str, Capability]:
        """Capabilities keyed by bridge namespace."""
        return {
            cap.namespace: cap
            for cap in (self.native_obj, self.video, self.native_ui, self.events)
        }

    async def supported(self) -> dict[str, bool]:
        return {
            name: await cap.is_supported()
            for name, cap in self.capabilities().items()
        }

    def shutdown(self) -> list[DestroyReport]:
        """Destroy every live handle and drop every app listener."""
        reports = self.native_obj.clear_all_active_objects()
        reports.append(self.video.close_all_video_players())
        reports.append(self.video.close_all_live_pushers())
        reports.append(self.native_ui.close_all_waiting_dialogs())
        removed = self.events.remove_all_event_listeners()
        failures = sum(len(r.failures) for r in reports)
        logger.info(
            "Runtime shut down: %d handles destroyed, %d teardown failures, "
            "%d app listeners removed.",
            sum(len(r.destroyed) for r in reports),
            failures,
            removed,
        )
        return reports

    def __repr__(self) -> str:
        return f"Runtime(context={self.context!r})"


def create_runtime(bridge: Any = None, *, config: BridgeConfig | None = None) -> Runtime:
    """Build a ``Runtime`` on a fresh ``BridgeContext``."""
    return Runtime(BridgeContext(bridge, config=config))
