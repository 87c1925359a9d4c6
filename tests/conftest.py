"""
Shared pytest fixtures and configuration for seedgate tests.

This module provides:
- Isolation from the real process (settings cache, default classifier,
  SEEDGATE_* and deployment environment variables)
- ``make_host`` / ``make_classifier`` factories for injected HostInfo
- Ready-made classifiers for the allowed and production verdicts
- A small ``Company`` entity and read-only collections over it
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generator

import pytest

# Ensure seedgate package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from seedgate.core.settings import SeedGateSettings, clear_settings_cache
from seedgate.detect.classifier import ContextClassifier, reset_default_classifier
from seedgate.detect.host import HostInfo
from seedgate.gate.access import AccessGate
from seedgate.gate.collections import ReadOnlyCollection
from seedgate.stores.memory import InMemoryCollection

_ISOLATED_VARIABLES = (
    "ENVIRONMENT",
    "ASPNETCORE_ENVIRONMENT",
    "DOTNET_ENVIRONMENT",
    "APP_ENV",
    "SEEDGATE_BUILD_PROFILE",
    "SEEDGATE_SCOPE_MODE",
    "SEEDGATE_REQUIRE_SCOPE",
    "SEEDGATE_INSPECT_CALL_STACK",
    "SEEDGATE_EXTRA_TEST_MODULES",
    "SEEDGATE_EXTRA_HOSTING_MARKERS",
    "SEEDGATE_LOG_LEVEL",
    "SEEDGATE_LOG_FORMAT",
)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop cached settings/classifier and deployment variables around each test."""
    for name in _ISOLATED_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    reset_default_classifier()
    yield
    clear_settings_cache()
    reset_default_classifier()


# =============================================================================
# Entities
# =============================================================================


@dataclass
class Company:
    """Read-only reference entity used across tests."""

    id: int | None
    name: str
    code: str = ""
    is_active: bool = True


@pytest.fixture
def make_company():
    """Factory fixture for Company instances with unique ids."""
    counter = iter(range(1, 10_000))

    def _make_company(name: str | None = None, **kwargs: Any) -> Company:
        company_id = kwargs.pop("id", next(counter))
        return Company(id=company_id, name=name or f"Company {company_id}", **kwargs)

    return _make_company


# =============================================================================
# Hosts and classifiers
# =============================================================================


@pytest.fixture
def settings() -> SeedGateSettings:
    """Release-profile settings independent of the real environment."""
    return SeedGateSettings(_env_file=None)


@pytest.fixture
def make_host():
    """
    Factory fixture for HostInfo snapshots.

    Defaults describe a bare, unknown process: no variables, no modules,
    an empty call stack.
    """

    def _make_host(
        environ: dict[str, str] | None = None,
        process_name: str = "app",
        argv: tuple[str, ...] = ("app",),
        modules: set[str] | None = None,
        frames: list[tuple[str, str]] | None = None,
        dev_mode: bool = False,
    ) -> HostInfo:
        frame_list = list(frames or [])
        return HostInfo(
            environ=environ or {},
            process_name=process_name,
            argv=argv,
            loaded_modules=frozenset(modules or {"sys", "os", "json"}),
            frames=lambda: iter(frame_list),
            dev_mode=dev_mode,
        )

    return _make_host


@pytest.fixture
def make_classifier(make_host, settings):
    """Factory fixture building a ContextClassifier over an injected host."""

    def _make_classifier(host: HostInfo | None = None, **host_kwargs: Any) -> ContextClassifier:
        return ContextClassifier(host=host or make_host(**host_kwargs), settings=settings)

    return _make_classifier


@pytest.fixture
def allowed_classifier(make_classifier) -> ContextClassifier:
    """Classifier whose verdict is 'allowed' (test framework loaded)."""
    return make_classifier(modules={"pytest"})


@pytest.fixture
def production_classifier(make_classifier) -> ContextClassifier:
    """Classifier whose verdict is 'production'."""
    return make_classifier(environ={"ENVIRONMENT": "Production"}, process_name="billing-api")


# =============================================================================
# Gates and collections
# =============================================================================


@pytest.fixture
def gate(allowed_classifier, settings) -> AccessGate:
    """Scope-authoritative gate in an allowed context."""
    return AccessGate(classifier=allowed_classifier, settings=settings)


@pytest.fixture
def production_gate(production_classifier, settings) -> AccessGate:
    return AccessGate(classifier=production_classifier, settings=settings)


@pytest.fixture
def store() -> InMemoryCollection:
    return InMemoryCollection(name="companies")


@pytest.fixture
def companies(store, gate) -> ReadOnlyCollection:
    return ReadOnlyCollection(store, gate)
