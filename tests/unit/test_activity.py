"""
Unit tests for ActivityTracker
"""

import asyncio
import pytest

from logstream.services.logs import ActivityTracker


class TestActivityTracker:
    """Test cases for ActivityTracker"""

    def test_register_marks_active(self):
        tracker = ActivityTracker()
        tracker.register_activity("b", now=1.0)
        tracker.register_activity("a", now=2.0)

        assert tracker.has_active_stream("a")
        assert tracker.active_sources() == ["a", "b"]
        assert tracker.last_activity("a") == 2.0
        assert tracker.last_activity("missing") is None

    def test_sweep_uses_window(self):
        tracker = ActivityTracker(inactivity_window=3.0)
        tracker.register_activity("coolify-1", now=10.0)

        assert tracker.sweep(now=12.9) == []
        assert tracker.has_active_stream("coolify-1")

        assert tracker.sweep(now=13.0) == ["coolify-1"]
        assert not tracker.has_active_stream("coolify-1")
        assert tracker.last_activity("coolify-1") is None

    def test_fresh_activity_extends_lifetime(self):
        tracker = ActivityTracker(inactivity_window=3.0)
        tracker.register_activity("s", now=10.0)
        tracker.register_activity("s", now=12.0)

        assert tracker.sweep(now=14.0) == []
        assert tracker.sweep(now=15.0) == ["s"]

    def test_sweep_only_expires_stale_sources(self):
        tracker = ActivityTracker(inactivity_window=3.0)
        tracker.register_activity("old", now=0.0)
        tracker.register_activity("new", now=5.0)

        assert tracker.sweep(now=6.0) == ["old"]
        assert tracker.active_sources() == ["new"]

    def test_unregister(self):
        tracker = ActivityTracker()
        tracker.register_activity("s")
        tracker.unregister_activity("s")
        tracker.unregister_activity("never-registered")

        assert not tracker.has_active_stream("s")
        assert tracker.active_sources() == []

    @pytest.mark.asyncio
    async def test_background_sweep(self):
        tracker = ActivityTracker(inactivity_window=0.05, sweep_interval=0.01)
        await tracker.start()
        await tracker.start()
        try:
            tracker.register_activity("s")
            assert tracker.has_active_stream("s")

            await asyncio.sleep(0.2)
            assert not tracker.has_active_stream("s")
        finally:
            await tracker.stop()

    @pytest.mark.asyncio
    async def test_stop_forgets_everything(self):
        tracker = ActivityTracker()
        await tracker.start()
        tracker.register_activity("s")

        await tracker.stop()

        assert tracker.active_sources() == []
        assert tracker.last_activity("s") is None
