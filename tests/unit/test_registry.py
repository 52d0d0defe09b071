"""Tests for HandleRegistry — ids, lookup, destroy and bulk teardown."""

from __future__ import annotations

import logging

import pytest

from plusbridge.core.errors import HandleNotFoundError, InvalidArgumentError
from plusbridge.core.registry import HandleRegistry, default_teardown
from plusbridge.models.handles import HandleKind, HandleState


class _Native:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.closed = 0

    def close(self) -> None:
        self.closed += 1
        if self.fail:
            raise RuntimeError("native close exploded")


class _Recyclable:
    def __init__(self) -> None:
        self.recycled = 0

    def recycle(self) -> None:
        self.recycled += 1


@pytest.fixture
def registry() -> HandleRegistry:
    return HandleRegistry()


class TestRegister:
    def test_register_returns_prefixed_id(self, registry):
        handle_id = registry.register(HandleKind.BITMAP, _Native())
        assert handle_id.startswith("bitmap-")

    def test_ids_are_unique(self, registry):
        ids = {registry.register(HandleKind.VIEW, _Native()) for _ in range(200)}
        assert len(ids) == 200

    def test_registered_handle_is_active(self, registry):
        handle_id = registry.register(HandleKind.VIEW, _Native())
        assert registry.require(HandleKind.VIEW, handle_id).state == HandleState.ACTIVE

    def test_plain_string_kind(self, registry):
        handle_id = registry.register("camera", _Native())
        assert registry.contains(HandleKind.CAMERA, handle_id)

    def test_missing_native_rejected(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.register(HandleKind.BITMAP, None)

    def test_empty_kind_rejected(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.register("", _Native())

    def test_suffix_length(self):
        registry = HandleRegistry(id_suffix_length=10)
        handle_id = registry.register("map", _Native())
        assert len(handle_id.rsplit("-", 1)[1]) == 10


class TestLookup:
    def test_get_miss_returns_none(self, registry):
        assert registry.get(HandleKind.BITMAP, "bitmap-nope") is None

    def test_require_miss_raises(self, registry):
        with pytest.raises(HandleNotFoundError):
            registry.require(HandleKind.BITMAP, "bitmap-nope")

    def test_kinds_are_separate(self, registry):
        handle_id = registry.register(HandleKind.BITMAP, _Native())
        assert registry.get(HandleKind.VIEW, handle_id) is None

    def test_ids_in_registration_order(self, registry):
        first = registry.register(HandleKind.VIEW, _Native())
        second = registry.register(HandleKind.VIEW, _Native())
        assert registry.ids(HandleKind.VIEW) == [first, second]

    def test_count_and_len(self, registry):
        registry.register(HandleKind.VIEW, _Native())
        registry.register(HandleKind.BITMAP, _Native())
        assert registry.count(HandleKind.VIEW) == 1
        assert len(registry) == 2
        assert sorted(registry.kinds()) == ["bitmap", "view"]

    def test_info_snapshot(self, registry):
        handle_id = registry.register(HandleKind.MAP, _Native())
        info = registry.require(HandleKind.MAP, handle_id).info()
        assert info.handle_id == handle_id
        assert info.kind == "map"
        assert info.state == HandleState.ACTIVE


class TestDestroy:
    def test_three_created_one_destroyed(self, registry):
        a = registry.register(HandleKind.BITMAP, _Native())
        b = registry.register(HandleKind.BITMAP, _Native())
        c = registry.register(HandleKind.BITMAP, _Native())
        assert registry.destroy(HandleKind.BITMAP, b) is True
        assert registry.count(HandleKind.BITMAP) == 2
        assert registry.ids(HandleKind.BITMAP) == [a, c]
        assert registry.get(HandleKind.BITMAP, b) is None

    def test_destroy_runs_teardown_once(self, registry):
        native = _Native()
        handle_id = registry.register(HandleKind.VIEW, native)
        registry.destroy(HandleKind.VIEW, handle_id)
        assert registry.destroy(HandleKind.VIEW, handle_id) is False
        assert native.closed == 1

    def test_destroyed_handle_state(self, registry):
        handle_id = registry.register(HandleKind.VIEW, _Native())
        handle = registry.require(HandleKind.VIEW, handle_id)
        registry.destroy(HandleKind.VIEW, handle_id)
        assert handle.state == HandleState.DESTROYED

    def test_custom_teardown(self, registry):
        seen = []
        handle_id = registry.register(HandleKind.VIEW, _Native(), teardown=seen.append)
        registry.destroy(HandleKind.VIEW, handle_id)
        assert len(seen) == 1

    def test_failing_teardown_still_removes(self, registry, caplog):
        handle_id = registry.register(HandleKind.VIEW, _Native(fail=True))
        with caplog.at_level(logging.WARNING, logger="plusbridge.core.registry"):
            assert registry.destroy(HandleKind.VIEW, handle_id) is True
        assert registry.get(HandleKind.VIEW, handle_id) is None
        assert "native close exploded" in caplog.text

    def test_release_skips_teardown(self, registry):
        native = _Native()
        handle_id = registry.register(HandleKind.VIEW, native)
        handle = registry.release(HandleKind.VIEW, handle_id)
        assert handle is not None and handle.lifecycle.is_destroyed
        assert native.closed == 0
        assert registry.release(HandleKind.VIEW, handle_id) is None

    def test_ids_never_reused_after_destroy(self, registry):
        old = registry.register(HandleKind.BITMAP, _Native())
        registry.destroy(HandleKind.BITMAP, old)
        new = registry.register(HandleKind.BITMAP, _Native())
        assert new != old
        assert registry.get(HandleKind.BITMAP, old) is None


class TestDestroyAll:
    def test_continues_past_failures(self, registry):
        good = [_Native(), _Native()]
        bad = _Native(fail=True)
        ids = [
            registry.register(HandleKind.VIEW, good[0]),
            registry.register(HandleKind.VIEW, bad),
            registry.register(HandleKind.VIEW, good[1]),
        ]
        report = registry.destroy_all(HandleKind.VIEW)
        assert report.destroyed == ids
        assert list(report.failures) == [ids[1]]
        assert not report.ok
        assert registry.count(HandleKind.VIEW) == 0
        assert all(n.closed == 1 for n in good)

    def test_empty_kind_report(self, registry):
        report = registry.destroy_all(HandleKind.MAP)
        assert report.ok
        assert report.destroyed == []

    def test_only_that_kind(self, registry):
        registry.register(HandleKind.VIEW, _Native())
        keep = registry.register(HandleKind.BITMAP, _Native())
        registry.destroy_all(HandleKind.VIEW)
        assert registry.ids(HandleKind.BITMAP) == [keep]

    def test_clear_every_kind(self, registry):
        registry.register(HandleKind.VIEW, _Native())
        registry.register(HandleKind.BITMAP, _Native())
        reports = registry.clear()
        assert sorted(r.kind for r in reports) == ["bitmap", "view"]
        assert len(registry) == 0


class TestDefaultTeardown:
    def test_prefers_close(self):
        native = _Native()
        default_teardown(native)
        assert native.closed == 1

    def test_falls_back_to_recycle(self):
        native = _Recyclable()
        default_teardown(native)
        assert native.recycled == 1

    def test_object_without_either_is_ignored(self):
        default_teardown(object())
