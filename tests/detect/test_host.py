"""Tests for seedgate.detect.host."""

import sys

from seedgate.detect.host import HostInfo, current_process_name, walk_call_stack


class TestHostInfo:
    def test_empty_defaults(self):
        host = HostInfo()
        assert host.getenv("ENVIRONMENT") is None
        assert host.process_name == ""
        assert list(host.frames()) == []

    def test_top_level_modules(self):
        host = HostInfo(loaded_modules=frozenset({"_pytest.python", "unittest.mock", "json"}))
        assert host.top_level_modules() == {"_pytest", "unittest", "json"}

    def test_from_runtime_reads_process(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "Staging")
        host = HostInfo.from_runtime()
        assert host.getenv("ENVIRONMENT") == "Staging"
        assert host.argv == tuple(sys.argv)
        assert "sys" in host.loaded_modules
        assert host.process_name

    def test_from_runtime_snapshots_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "Staging")
        host = HostInfo.from_runtime()
        monkeypatch.setenv("ENVIRONMENT", "Production")
        assert host.getenv("ENVIRONMENT") == "Staging"


class TestCallStack:
    def test_walk_reports_calling_function(self):
        def seed_reference_data():
            return list(walk_call_stack())

        frames = seed_reference_data()
        names = [name for name, _owner in frames]
        assert "seed_reference_data" in names

    def test_walk_starts_at_caller(self):
        def seed_reference_data():
            return list(walk_call_stack())

        def upgrade():
            return seed_reference_data()

        frames = upgrade()
        assert [name for name, _owner in frames[:3]] == [
            "seed_reference_data",
            "upgrade",
            "test_walk_starts_at_caller",
        ]

    def test_method_owner_is_class(self):
        class CompanyMigration:
            def apply(self):
                return list(walk_call_stack())

        frames = CompanyMigration().apply()
        assert ("apply", "TestCallStack.test_method_owner_is_class.<locals>.CompanyMigration") in frames


class TestProcessName:
    def test_console_script_uses_argv_stem(self, monkeypatch):
        monkeypatch.setattr(sys.modules["__main__"], "__spec__", None, raising=False)
        monkeypatch.setattr(sys, "argv", ["/usr/local/bin/alembic", "upgrade", "head"])
        assert current_process_name() == "alembic"
