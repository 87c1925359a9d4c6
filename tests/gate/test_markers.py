"""Tests for the production_usage marker."""

import pytest
from structlog.testing import capture_logs

from seedgate.gate.markers import ProductionUsage, get_production_usage, production_usage


class TestMarker:
    def test_function_marked_in_place(self):
        def seed():
            return "seeded"

        marked = production_usage("Test data only")(seed)
        assert marked is seed
        assert get_production_usage(seed) == ProductionUsage("Test data only", False)

    def test_class_marked(self):
        @production_usage(always_warn=True)
        class SeedData:
            pass

        marker = get_production_usage(SeedData)
        assert marker.always_warn is True
        assert marker.message == "This API is not intended for production use"

    def test_bound_method(self):
        class Fixtures:
            @production_usage("fixtures")
            def load(self):
                return 1

        assert get_production_usage(Fixtures().load).message == "fixtures"

    def test_unmarked(self):
        assert get_production_usage(len) is None


class TestAlwaysWarn:
    def test_sync_call_logs(self):
        @production_usage("Resets reference tables", always_warn=True)
        def reset_tables(count):
            return count * 2

        with capture_logs() as logs:
            assert reset_tables(2) == 4
        assert logs[0]["event"] == "production_usage_called"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["message"] == "Resets reference tables"
        assert reset_tables.__name__ == "reset_tables"
        assert get_production_usage(reset_tables).always_warn is True

    @pytest.mark.asyncio
    async def test_async_call_logs(self):
        @production_usage(always_warn=True)
        async def load_fixtures():
            return "loaded"

        with capture_logs() as logs:
            assert await load_fixtures() == "loaded"
        assert [entry["event"] for entry in logs] == ["production_usage_called"]

    def test_no_warning_by_default(self):
        @production_usage()
        def seed():
            return None

        with capture_logs() as logs:
            seed()
        assert logs == []
