"""Tests for Runtime — capabilities sharing one context."""

from __future__ import annotations

import pytest

from plusbridge import create_runtime
from plusbridge.bridge.host import install_bridge


class TestRuntime:
    def test_capabilities_share_context(self, runtime):
        caps = runtime.capabilities()
        assert set(caps) == {"native_obj", "video", "native_ui", "events"}
        assert all(cap.context is runtime.context for cap in caps.values())

    @pytest.mark.asyncio
    async def test_supported(self, runtime, bridge):
        bridge.video = None
        assert await runtime.supported() == {
            "native_obj": True,
            "video": False,
            "native_ui": True,
            "events": True,
        }

    @pytest.mark.asyncio
    async def test_nothing_supported_without_bridge(self, test_config):
        runtime = create_runtime(config=test_config)
        assert not any((await runtime.supported()).values())

    def test_ambient_bridge(self, bridge, test_config):
        runtime = create_runtime(config=test_config)
        install_bridge(bridge)
        assert runtime.native_obj.create_bitmap(1, 1).id.startswith("bitmap-")

    def test_shutdown(self, runtime, bridge):
        runtime.native_obj.create_bitmap(5, 5)
        runtime.native_obj.create_view({"id": "v"})
        runtime.video.create_video_player("https://x/y.mp4", success=lambda v: None)
        runtime.native_ui.show_waiting("wait")
        runtime.events.add_event_listener("pause", lambda e: None)

        reports = runtime.shutdown()

        assert sum(len(r.destroyed) for r in reports) == 4
        assert len(runtime.context.registry) == 0
        assert runtime.events.get_listener_count() == 0
        assert bridge.events.listener_count() == 0

    def test_separate_runtimes_are_isolated(self, bridge, test_config):
        a = create_runtime(bridge, config=test_config)
        b = create_runtime(bridge, config=test_config)
        a.native_obj.create_bitmap(1, 1)
        assert b.native_obj.get_active_bitmaps_count() == 0
