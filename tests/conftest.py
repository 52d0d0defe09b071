"""Shared test fixtures for plusbridge.

``FakeBridge`` stands in for the native host. Asynchronous methods settle
through ``FakeBridge.settle`` which, depending on ``mode``, calls back
immediately ("sync"), on the next loop iteration ("deferred"), or only when
the test calls ``flush()`` ("manual").
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from plusbridge.bridge.host import uninstall_bridge
from plusbridge.config import BridgeConfig
from plusbridge.context import BridgeContext
from plusbridge.runtime import Runtime, create_runtime


# ---------------------------------------------------------------------------
# Fake native objects
# ---------------------------------------------------------------------------


class FakeEventSource:
    """Native object that accepts listeners and can emit to them."""

    def __init__(self) -> None:
        self.listeners: list[tuple[str, Callable[..., Any]]] = []
        self.calls: list[tuple[Any, ...]] = []

    def add_event_listener(self, event: str, fn: Callable[..., Any]) -> None:
        self.listeners.append((event, fn))

    def remove_event_listener(self, event: str, fn: Callable[..., Any]) -> None:
        self.listeners.remove((event, fn))

    def emit(self, event: str, payload: Any = None) -> None:
        for registered, fn in list(self.listeners):
            if registered == event:
                fn(payload)

    def listener_count(self, event: str | None = None) -> int:
        return sum(1 for e, _ in self.listeners if event is None or e == event)


class FakeBitmap:
    def __init__(self, bridge: FakeBridge, native_id: str, options: dict[str, Any]) -> None:
        self.bridge = bridge
        self.id = native_id
        self.options = options
        self.recycled = 0
        self.data = ""

    def load(self, path: str, success: Callable, error: Callable) -> None:
        self.bridge.settle("bitmap.load", success, error, None)

    def load_base64_data(self, data: str, success: Callable, error: Callable) -> None:
        self.data = data
        self.bridge.settle("bitmap.load_base64_data", success, error, None)

    def save(self, path: str, options: dict[str, Any], success: Callable, error: Callable) -> None:
        self.bridge.settle(
            "bitmap.save", success, error, {"target": path, "width": 10, "height": 10}
        )

    def clear(self) -> None:
        self.data = ""

    def to_base64_data(self) -> str:
        return self.data or "data:image/png;base64,AAAA"

    def recycle(self) -> None:
        self.bridge.raise_if("bitmap.recycle")
        self.recycled += 1


class FakeView(FakeEventSource):
    def __init__(self, bridge: FakeBridge, native_id: str, styles: dict[str, Any]) -> None:
        super().__init__()
        self.bridge = bridge
        self.id = native_id
        self.styles = styles
        self.visible = False
        self.closed = 0
        self.drawn: list[tuple[Any, ...]] = []

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def close(self) -> None:
        self.bridge.raise_if("view.close")
        self.closed += 1

    def draw_rect(self, styles: dict[str, Any], position: dict[str, Any]) -> None:
        self.drawn.append(("rect", styles, position))

    def draw_text(self, text: str, position: dict[str, Any], styles: dict[str, Any]) -> None:
        self.bridge.raise_if("view.draw_text")
        self.drawn.append(("text", text, position, styles))


class FakeImageSlider(FakeView):
    def __init__(self, bridge: FakeBridge, native_id: str, styles: dict[str, Any]) -> None:
        super().__init__(bridge, native_id, styles)
        self.images: list[Any] = list(styles.get("images", []))

    def add_images(self, images: list[Any]) -> None:
        self.images.extend(images)

    def set_images(self, images: list[Any]) -> None:
        self.images = list(images)

    def current_image_index(self) -> int:
        return 0


class FakeVideoPlayer(FakeEventSource):
    def __init__(self, bridge: FakeBridge, url: str, styles: dict[str, Any]) -> None:
        super().__init__()
        self.bridge = bridge
        self.id = f"native-player-{len(bridge.created)}"
        self.src = url
        self.styles = styles
        self.duration = 120.0
        self.current_time = 0.0
        self.buffered = 0.0
        self.paused = True
        self.seeking = False
        self.ended = False
        self.playback_rate = 1.0
        self.volume = 1.0
        self.muted = False
        self.fullscreen = False
        self.closed = 0

    def play(self, success: Callable, error: Callable) -> None:
        self.paused = False
        self.bridge.settle("video_player.play", success, error, None)

    def pause(self, success: Callable, error: Callable) -> None:
        self.paused = True
        self.bridge.settle("video_player.pause", success, error, None)

    def stop(self, success: Callable, error: Callable) -> None:
        self.paused = True
        self.current_time = 0.0
        self.bridge.settle("video_player.stop", success, error, None)

    def seek(self, position: float, success: Callable, error: Callable) -> None:
        self.current_time = position
        self.bridge.settle("video_player.seek", success, error, position)

    def set_styles(self, styles: dict[str, Any], success: Callable, error: Callable) -> None:
        self.styles.update(styles)
        self.bridge.settle("video_player.set_styles", success, error, None)

    def close(self, success: Callable, error: Callable) -> None:
        self.closed += 1
        self.bridge.settle("video_player.close", success, error, None)


class FakeLivePusher(FakeEventSource):
    def __init__(self, bridge: FakeBridge, url: str, styles: dict[str, Any]) -> None:
        super().__init__()
        self.bridge = bridge
        self.id = f"native-pusher-{len(bridge.created)}"
        self.url = url
        self.status = "ready"
        self.muted = False
        self.closed = 0
        self.camera_switches = 0

    def start(self, success: Callable, error: Callable) -> None:
        self.status = "pushing"
        self.bridge.settle("live_pusher.start", success, error, None)

    def stop(self, success: Callable, error: Callable) -> None:
        self.status = "stopped"
        self.bridge.settle("live_pusher.stop", success, error, None)

    def switch_camera(self) -> None:
        self.camera_switches += 1

    def close(self, success: Callable, error: Callable) -> None:
        self.closed += 1
        self.bridge.settle("live_pusher.close", success, error, None)


class FakeWaitingDialog:
    def __init__(self, title: str, options: dict[str, Any]) -> None:
        self.title = title
        self.options = options
        self.closed = 0

    def set_title(self, title: str) -> None:
        self.title = title

    def close(self) -> None:
        self.closed += 1


# ---------------------------------------------------------------------------
# Fake namespaces
# ---------------------------------------------------------------------------


class FakeNativeObjNamespace:
    def __init__(self, bridge: FakeBridge) -> None:
        self.bridge = bridge

    def Bitmap(self, native_id: str, options: dict[str, Any]) -> FakeBitmap:  # noqa: N802
        self.bridge.raise_if("native_obj.Bitmap")
        return self.bridge.track(FakeBitmap(self.bridge, native_id, options))

    def View(self, native_id: str, styles: dict[str, Any]) -> FakeView:  # noqa: N802
        return self.bridge.track(FakeView(self.bridge, native_id, styles))

    def ImageSlider(self, native_id: str, styles: dict[str, Any]) -> FakeImageSlider:  # noqa: N802
        return self.bridge.track(FakeImageSlider(self.bridge, native_id, styles))


class FakeVideoNamespace:
    def __init__(self, bridge: FakeBridge) -> None:
        self.bridge = bridge

    def create_video_player(
        self, url: str, styles: dict[str, Any], success: Callable, error: Callable
    ) -> None:
        self.bridge.raise_if("video.create_video_player")
        player = self.bridge.track(FakeVideoPlayer(self.bridge, url, styles))
        self.bridge.settle("video.create_video_player", success, error, player)

    def create_live_pusher(
        self, url: str, styles: dict[str, Any], success: Callable, error: Callable
    ) -> None:
        pusher = self.bridge.track(FakeLivePusher(self.bridge, url, styles))
        self.bridge.settle("video.create_live_pusher", success, error, pusher)


class FakeNativeUINamespace:
    def __init__(self, bridge: FakeBridge) -> None:
        self.bridge = bridge
        self.toasts: list[tuple[str, dict[str, Any]]] = []
        self.dialogs: list[FakeWaitingDialog] = []
        self.close_waiting_calls = 0

    def alert(self, message: str, callback: Callable, title: Any, button: Any) -> None:
        self.bridge.raise_if("native_ui.alert")
        self.bridge.settle("native_ui.alert", callback, lambda _: None, {"index": 0})

    def confirm(self, message: str, callback: Callable, title: Any, buttons: Any) -> None:
        index = len(buttons) - 1 if buttons else 0
        self.bridge.settle("native_ui.confirm", callback, lambda _: None, {"index": index})

    def toast(self, message: str, options: dict[str, Any]) -> None:
        self.toasts.append((message, options))

    def show_waiting(self, title: str, options: dict[str, Any]) -> FakeWaitingDialog:
        dialog = FakeWaitingDialog(title, options)
        self.dialogs.append(dialog)
        return dialog

    def close_waiting(self) -> None:
        self.close_waiting_calls += 1


class FakeEventsNamespace(FakeEventSource):
    """App-level events (the host's document-level listeners)."""


class FakeBridge:
    """Scriptable stand-in for the native host bridge."""

    def __init__(self, mode: str = "sync") -> None:
        self.mode = mode
        self.pending: list[Callable[[], None]] = []
        self.failures: dict[str, Any] = {}
        self.raises: dict[str, Exception] = {}
        self.created: list[Any] = []
        self.native_obj = FakeNativeObjNamespace(self)
        self.video = FakeVideoNamespace(self)
        self.native_ui = FakeNativeUINamespace(self)
        self.events = FakeEventsNamespace()

    def fail_next(self, method: str, raw: Any) -> None:
        """Make the next settlement of *method* call ``error(raw)``."""
        self.failures[method] = raw

    def raise_next(self, method: str, exc: Exception) -> None:
        """Make the next call of *method* raise *exc* synchronously."""
        self.raises[method] = exc

    def raise_if(self, method: str) -> None:
        exc = self.raises.pop(method, None)
        if exc is not None:
            raise exc

    def track(self, native: Any) -> Any:
        self.created.append(native)
        return native

    def settle(self, method: str, success: Callable, error: Callable, value: Any) -> None:
        self.raise_if(method)
        failure = self.failures.pop(method, None)

        def run() -> None:
            if failure is not None:
                error(failure)
            else:
                success(value)

        if self.mode == "sync":
            run()
        elif self.mode == "deferred":
            asyncio.get_running_loop().call_soon(run)
        else:
            self.pending.append(run)

    def flush(self) -> int:
        """Run every pending settlement (manual mode); return how many ran."""
        ran = 0
        while self.pending:
            self.pending.pop(0)()
            ran += 1
        return ran


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _no_ambient_bridge():
    """Keep the ambient bridge from leaking between tests."""
    uninstall_bridge()
    yield
    uninstall_bridge()


@pytest.fixture
def event_source() -> FakeEventSource:
    """Provide a standalone native event source."""
    return FakeEventSource()


@pytest.fixture
def test_config() -> BridgeConfig:
    """Config with the host-module lookup disabled and a short wait deadline."""
    return BridgeConfig(host_module="", default_wait_timeout_ms=1000)


@pytest.fixture
def bridge() -> FakeBridge:
    """Provide a fresh FakeBridge settling synchronously."""
    return FakeBridge()


@pytest.fixture
def context(bridge: FakeBridge, test_config: BridgeConfig) -> BridgeContext:
    """Provide a BridgeContext with its own registry and listener map."""
    return BridgeContext(bridge, config=test_config)


@pytest.fixture
def bare_context(test_config: BridgeConfig) -> BridgeContext:
    """Provide a BridgeContext with no bridge at all."""
    return BridgeContext(config=test_config)


@pytest.fixture
def runtime(bridge: FakeBridge, test_config: BridgeConfig) -> Runtime:
    """Provide a Runtime on the fake bridge."""
    return create_runtime(bridge, config=test_config)
