"""Video players and live pushers.

Both are created asynchronously by the bridge and released with a
dual-mode ``close()``. Player state (``volume``, ``current_time`` ...) is
read and written through forwarded properties, so touching a closed player
raises ``HandleDestroyedError`` instead of returning stale values.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from plusbridge.capabilities.base import (
    Capability,
    NativeHandle,
    require_text,
)
from plusbridge.core.adapter import ErrorCallback, SuccessCallback
from plusbridge.core.errors import InvalidArgumentError
from plusbridge.core.proxy import ForwardedProperty
from plusbridge.models.handles import DestroyReport, HandleKind

VideoPlayerErrorCode = MappingProxyType({
    "NOT_AVAILABLE": 1001,
    "INVALID_URL": 1002,
    "PLAY_ERROR": 1003,
    "NETWORK_ERROR": 1004,
    "DECODE_ERROR": 1005,
    "PERMISSION_DENIED": 1006,
    "TIMEOUT": 1007,
    "UNKNOWN_ERROR": 1099,
})

LivePusherErrorCode = MappingProxyType({
    "NOT_AVAILABLE": 1101,
    "INVALID_URL": 1102,
    "PUSH_ERROR": 1103,
    "NETWORK_ERROR": 1104,
    "ENCODE_ERROR": 1105,
    "CAMERA_ERROR": 1106,
    "MICROPHONE_ERROR": 1107,
    "PERMISSION_DENIED": 1108,
    "TIMEOUT": 1109,
    "UNKNOWN_ERROR": 1199,
})

VideoEventType = MappingProxyType({
    "PLAY": "play",
    "PAUSE": "pause",
    "ENDED": "ended",
    "ERROR": "error",
    "TIME_UPDATE": "timeupdate",
    "WAITING": "waiting",
    "FULLSCREEN_CHANGE": "fullscreenchange",
    "STATE_CHANGE": "statechange",
    "NET_STATUS": "netstatus",
})

_PLAYER_EVENT_FIELDS = ("type", "current_time", "duration", "message", "code")


class VideoPlayer(NativeHandle):
    """A native video player."""

    kind = HandleKind.VIDEO_PLAYER
    error_code = VideoPlayerErrorCode["PLAY_ERROR"]

    native_id = ForwardedProperty(native_name="id", read_only=True)
    src = ForwardedProperty()
    duration = ForwardedProperty(read_only=True)
    current_time = ForwardedProperty()
    buffered = ForwardedProperty(read_only=True)
    paused = ForwardedProperty(read_only=True)
    seeking = ForwardedProperty(read_only=True)
    ended = ForwardedProperty(read_only=True)
    playback_rate = ForwardedProperty()
    volume = ForwardedProperty()
    muted = ForwardedProperty()
    fullscreen = ForwardedProperty(read_only=True)

    def _normalize_event(self, payload: Any) -> dict[str, Any]:
        source = payload if isinstance(payload, Mapping) else {
            name: getattr(payload, name) for name in _PLAYER_EVENT_FIELDS
            if hasattr(payload, name)
        }
        event = {name: source.get(name) for name in _PLAYER_EVENT_FIELDS}
        event["type"] = event["type"] or "unknown"
        event["target"] = source.get("target") or self.id
        return event

    def _control(
        self,
        method: str,
        *args: Any,
        success: SuccessCallback | None,
        error: ErrorCallback | None,
    ) -> asyncio.Future | None:
        adapter = self._adapter(method, fallback_message=f"Video {method} failed")
        return adapter(*args, success=success, error=error)

    def play(self, *, success: SuccessCallback | None = None,
             error: ErrorCallback | None = None) -> asyncio.Future | None:
        return self._control("play", success=success, error=error)

    def pause(self, *, success: SuccessCallback | None = None,
              error: ErrorCallback | None = None) -> asyncio.Future | None:
        return self._control("pause", success=success, error=error)

    def stop(self, *, success: SuccessCallback | None = None,
             error: ErrorCallback | None = None) -> asyncio.Future | None:
        return self._control("stop", success=success, error=error)

    def seek(self, position: float, *, success: SuccessCallback | None = None,
             error: ErrorCallback | None = None) -> asyncio.Future | None:
        if isinstance(position, bool) or not isinstance(position, (int, float)) or position < 0:
            raise InvalidArgumentError(
                "Seek position must be a non-negative number", code=self.error_code
            )
        return self._control("seek", position, success=success, error=error)

    def set_styles(self, styles: dict[str, Any], *, success: SuccessCallback | None = None,
                   error: ErrorCallback | None = None) -> asyncio.Future | None:
        if not isinstance(styles, Mapping):
            raise InvalidArgumentError("Styles must be a mapping", code=self.error_code)
        return self._control("set_styles", dict(styles), success=success, error=error)

    def get_info(self) -> dict[str, Any]:
        """Snapshot of every forwarded property plus the handle id."""
        info = self.properties()
        info["handle_id"] = self.id
        return info

    def close(self, *, success: SuccessCallback | None = None,
              error: ErrorCallback | None = None) -> asyncio.Future | None:
        """Close the player. Closing twice succeeds without a second native close."""
        return self._close_async(
            success=success, error=error, fallback_message="Closing video player failed"
        )

    def _release_native(self, native: Any) -> None:
        # Bulk teardown cannot wait for the native callbacks.
        native.close(lambda *_: None, lambda *_: None)


class LivePusher(NativeHandle):
    """A native live-stream pusher."""

    kind = HandleKind.LIVE_PUSHER
    error_code = LivePusherErrorCode["PUSH_ERROR"]

    native_id = ForwardedProperty(native_name="id", read_only=True)
    url = ForwardedProperty()
    status = ForwardedProperty(read_only=True)
    muted = ForwardedProperty()

    def start(self, *, success: SuccessCallback | None = None,
              error: ErrorCallback | None = None) -> asyncio.Future | None:
        adapter = self._adapter("start", fallback_message="Starting live push failed")
        return adapter(success=success, error=error)

    def stop(self, *, success: SuccessCallback | None = None,
             error: ErrorCallback | None = None) -> asyncio.Future | None:
        adapter = self._adapter("stop", fallback_message="Stopping live push failed")
        return adapter(success=success, error=error)

    def switch_camera(self) -> None:
        self._call("switch_camera")

    async def wait_for_status(self, status: str, timeout_ms: float | None = None) -> dict[str, Any]:
        """Wait until a ``statechange`` event reports *status*."""
        require_text(status, "status must be a non-empty string", code=self.error_code)
        return await self.wait_for_event(
            VideoEventType["STATE_CHANGE"],
            timeout_ms,
            predicate=lambda event: event.get("status") == status,
        )

    def close(self, *, success: SuccessCallback | None = None,
              error: ErrorCallback | None = None) -> asyncio.Future | None:
        return self._close_async(
            success=success, error=error, fallback_message="Closing live pusher failed"
        )

    def _release_native(self, native: Any) -> None:
        native.close(lambda *_: None, lambda *_: None)


class VideoCapability(Capability):
    """Creates and tracks video players and live pushers."""

    namespace = "video"

    def _create(
        self,
        cls: type[NativeHandle],
        method: str,
        url: str,
        styles: dict[str, Any] | None,
        codes: Mapping[str, int],
        success: SuccessCallback | None,
        error: ErrorCallback | None,
    ) -> asyncio.Future | None:
        require_text(url, "url must be a non-empty string", code=codes["INVALID_URL"])
        if styles is not None and not isinstance(styles, Mapping):
            raise InvalidArgumentError("styles must be a mapping", code=codes["INVALID_URL"])
        adapter = self._context.adapter(
            self.namespace,
            method,
            fallback_code=codes["UNKNOWN_ERROR"],
            fallback_message=f"{method} failed",
            transform=lambda native: self._wrap(cls, native),
            discard=lambda native: self._wrap(cls, native).destroy(),
        )
        return adapter(url, dict(styles or {}), success=success, error=error)

    def create_video_player(
        self,
        url: str,
        styles: dict[str, Any] | None = None,
        *,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
    ) -> asyncio.Future | None:
        """Create a player; delivers a ``VideoPlayer``."""
        return self._create(VideoPlayer, "create_video_player", url, styles,
                            VideoPlayerErrorCode, success, error)

    def create_live_pusher(
        self,
        url: str,
        styles: dict[str, Any] | None = None,
        *,
        success: SuccessCallback | None = None,
        error: ErrorCallback | None = None,
    ) -> asyncio.Future | None:
        """Create a pusher; delivers a ``LivePusher``."""
        return self._create(LivePusher, "create_live_pusher", url, styles,
                            LivePusherErrorCode, success, error)

    def get_video_player(self, handle_id: str) -> VideoPlayer | None:
        return self._lookup(VideoPlayer, handle_id)

    def get_live_pusher(self, handle_id: str) -> LivePusher | None:
        return self._lookup(LivePusher, handle_id)

    def get_active_video_players_count(self) -> int:
        return self._count(HandleKind.VIDEO_PLAYER)

    def get_active_video_players_ids(self) -> list[str]:
        return self._ids(HandleKind.VIDEO_PLAYER)

    def get_active_live_pushers_count(self) -> int:
        return self._count(HandleKind.LIVE_PUSHER)

    def get_active_live_pushers_ids(self) -> list[str]:
        return self._ids(HandleKind.LIVE_PUSHER)

    def close_all_video_players(self) -> DestroyReport:
        return self._close_all(HandleKind.VIDEO_PLAYER)

    def close_all_live_pushers(self) -> DestroyReport:
        return self._close_all(HandleKind.LIVE_PUSHER)
