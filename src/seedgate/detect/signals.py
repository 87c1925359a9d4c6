"""
Heuristic signals used to classify the execution context.

A :class:`Signal` is a named predicate over a :class:`HostInfo` snapshot,
tagged with the :class:`SignalKind` it votes for. Signals never raise: a
check that cannot read its input (stack capture failure, odd environment
values) counts as "did not fire".

Manifesto:
    These are best-effort hints, not a security boundary. A production
    deployment can look like a test run (a test framework imported by a
    dependency) and a migration can look like a web service. seedgate makes
    the ordering explicit instead of pretending the heuristics are airtight:

    - **Allowed-context signals dominate production signals.** A process
      that is both "a migration tool" and "named like a service" is allowed.
    - **Unknown is production.** Nothing firing means the riskier verdict.

Architecture:
    ::

        default_signals(settings)          priority order
        ─────────────────────────────────────────────────
        DEBUG        build_profile          1
        MIGRATION    migration_process_name 2
                     migration_tool
                     migration_arguments
                     migration_call_stack   (optional, slow)
        TEST         test_framework_loaded
                     test_runner_process
                     pytest_current_test
        DEVELOPMENT  development_environment
        PRODUCTION   production_environment 3
                     hosting_platform
                     production_process_name

Guardrails:
    ❌ DON'T: Put a PRODUCTION signal ahead of allowed-context signals
    ✅ DO: Let ContextClassifier partition signals by kind

    ❌ DON'T: Call os.environ / sys.modules inside a check
    ✅ DO: Read everything through the HostInfo argument

Tags:
    heuristics, environment-detection, signals, seedgate
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from seedgate.core.logging import get_logger
from seedgate.core.settings import SeedGateSettings
from seedgate.detect.host import HostInfo

logger = get_logger(__name__)


class SignalKind(str, Enum):
    """What a firing signal says about the context."""

    DEBUG = "debug"
    MIGRATION = "migration"
    TEST = "test"
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @property
    def allows(self) -> bool:
        return self is not SignalKind.PRODUCTION


@dataclass(frozen=True)
class Signal:
    """A named boolean check over ambient process information."""

    name: str
    kind: SignalKind
    check: Callable[[HostInfo], bool]

    def evaluate(self, host: HostInfo) -> bool:
        try:
            return bool(self.check(host))
        except Exception as exc:
            logger.debug("signal_unreadable", signal=self.name, error=repr(exc))
            return False


# ── Indicator tables ─────────────────────────────────────────────────────

ENVIRONMENT_VARIABLES = (
    "ASPNETCORE_ENVIRONMENT",
    "DOTNET_ENVIRONMENT",
    "ENVIRONMENT",
    "APP_ENV",
)
DEVELOPMENT_VALUES = frozenset({"development", "local", "dev"})
PRODUCTION_VALUES = frozenset({"production"})

HOSTING_MARKERS = (
    "KUBERNETES_SERVICE_HOST",
    "AWS_LAMBDA_FUNCTION_NAME",
    "AWS_EXECUTION_ENV",
    "FUNCTIONS_WORKER_RUNTIME",
    "K_SERVICE",
    "WEBSITE_SITE_NAME",
    "ECS_CONTAINER_METADATA_URI_V4",
    "DYNO",
)

MIGRATION_NAME_PATTERNS = ("migration", "migrate")
MIGRATION_TOOLS = frozenset({"alembic", "yoyo", "yoyo-migrate", "django-admin"})
MIGRATION_ARGUMENTS = frozenset({"migrate", "makemigrations", "upgrade", "downgrade", "revision"})
MIGRATION_FRAME_SUBSTRINGS = ("migration", "migrate", "dbcontext", "modelbuilder", "alembic")
# Short indicators only match whole name tokens, "up" must not match "setup"
MIGRATION_FRAME_TOKENS = frozenset({"up", "down", "upgrade", "downgrade"})

TEST_FRAMEWORK_MODULES = frozenset({"pytest", "_pytest", "unittest", "nose", "nose2", "ward"})
TEST_RUNNER_PATTERNS = ("pytest", "py.test", "nosetests", "testhost")

PRODUCTION_NAME_PATTERNS = ("web", "api", "service", "server", "host", "production", "prod")
NON_PRODUCTION_NAME_PATTERNS = ("test", "integration", "migration", "dev", "debug", "local")

_TOKEN_SPLIT = re.compile(r"[^0-9a-zA-Z]+|(?<=[a-z0-9])(?=[A-Z])")


def name_tokens(name: str) -> set[str]:
    """Split ``snake_case``, ``CamelCase`` and dotted names into lowercase tokens."""
    return {token.lower() for token in _TOKEN_SPLIT.split(name) if token}


# ── Signal factories ─────────────────────────────────────────────────────


def env_equals(
    name: str,
    kind: SignalKind,
    variables: Collection[str],
    values: Collection[str],
) -> Signal:
    """Fires when any of *variables* equals one of *values* (case-insensitive)."""
    wanted = {v.lower() for v in values}

    def check(host: HostInfo) -> bool:
        return any((host.getenv(var) or "").strip().lower() in wanted for var in variables)

    return Signal(name, kind, check)


def env_present(name: str, kind: SignalKind, variables: Collection[str]) -> Signal:
    """Fires when any of *variables* is set to a non-empty value."""

    def check(host: HostInfo) -> bool:
        return any(host.getenv(var) for var in variables)

    return Signal(name, kind, check)


def process_name_contains(
    name: str,
    kind: SignalKind,
    patterns: Collection[str],
    excluding: Collection[str] = (),
) -> Signal:
    """Fires when the process name contains a pattern and none of *excluding*."""

    def check(host: HostInfo) -> bool:
        process = host.process_name.lower()
        if any(p in process for p in excluding):
            return False
        return any(p in process for p in patterns)

    return Signal(name, kind, check)


def known_process(name: str, kind: SignalKind, processes: Collection[str]) -> Signal:
    """Fires when the process name (or ``argv[0]`` stem) is one of *processes*."""

    def check(host: HostInfo) -> bool:
        candidates = {host.process_name.lower()}
        if host.argv:
            candidates.add(PurePath(host.argv[0]).stem.lower())
        return any(candidate in processes for candidate in candidates)

    return Signal(name, kind, check)


def argv_contains(name: str, kind: SignalKind, arguments: Collection[str]) -> Signal:
    """Fires when a command-line argument (after the program) is in *arguments*."""

    def check(host: HostInfo) -> bool:
        return any(arg.lower() in arguments for arg in host.argv[1:])

    return Signal(name, kind, check)


def modules_loaded(name: str, kind: SignalKind, modules: Collection[str]) -> Signal:
    """Fires when a top-level module in *modules* has been imported."""

    def check(host: HostInfo) -> bool:
        return not host.top_level_modules().isdisjoint(modules)

    return Signal(name, kind, check)


def call_stack_matches(
    name: str,
    kind: SignalKind,
    substrings: Collection[str] = MIGRATION_FRAME_SUBSTRINGS,
    tokens: Collection[str] = MIGRATION_FRAME_TOKENS,
) -> Signal:
    """Fires when a frame's function or owner name looks migration-shaped.

    Walks the full stack, so it is only affordable because the classifier
    evaluates signals once per instance.
    """

    def matches(text: str) -> bool:
        lowered = text.lower()
        if any(s in lowered for s in substrings):
            return True
        return not name_tokens(text).isdisjoint(tokens)

    def check(host: HostInfo) -> bool:
        return any(matches(function) or matches(owner) for function, owner in host.frames())

    return Signal(name, kind, check)


def build_profile(is_debug: bool) -> Signal:
    """Fires for debug builds: configured debug profile or ``python -X dev``."""
    return Signal("build_profile", SignalKind.DEBUG, lambda host: is_debug or host.dev_mode)


def default_signals(settings: SeedGateSettings) -> list[Signal]:
    """The standard signal set, in priority order."""
    signals = [
        build_profile(settings.is_debug_build),
        process_name_contains("migration_process_name", SignalKind.MIGRATION, MIGRATION_NAME_PATTERNS),
        known_process("migration_tool", SignalKind.MIGRATION, MIGRATION_TOOLS),
        argv_contains("migration_arguments", SignalKind.MIGRATION, MIGRATION_ARGUMENTS),
    ]
    if settings.inspect_call_stack:
        signals.append(call_stack_matches("migration_call_stack", SignalKind.MIGRATION))
    signals += [
        modules_loaded(
            "test_framework_loaded",
            SignalKind.TEST,
            TEST_FRAMEWORK_MODULES | set(settings.extra_test_modules),
        ),
        process_name_contains("test_runner_process", SignalKind.TEST, TEST_RUNNER_PATTERNS),
        env_present("pytest_current_test", SignalKind.TEST, ("PYTEST_CURRENT_TEST",)),
        env_equals(
            "development_environment",
            SignalKind.DEVELOPMENT,
            ENVIRONMENT_VARIABLES,
            DEVELOPMENT_VALUES,
        ),
        env_equals(
            "production_environment",
            SignalKind.PRODUCTION,
            ENVIRONMENT_VARIABLES,
            PRODUCTION_VALUES,
        ),
        env_present(
            "hosting_platform",
            SignalKind.PRODUCTION,
            HOSTING_MARKERS + tuple(settings.extra_hosting_markers),
        ),
        process_name_contains(
            "production_process_name",
            SignalKind.PRODUCTION,
            PRODUCTION_NAME_PATTERNS,
            excluding=NON_PRODUCTION_NAME_PATTERNS,
        ),
    ]
    return signals


__all__ = [
    "SignalKind",
    "Signal",
    "name_tokens",
    "env_equals",
    "env_present",
    "process_name_contains",
    "known_process",
    "argv_contains",
    "modules_loaded",
    "call_stack_matches",
    "build_profile",
    "default_signals",
]
