"""
Execution-context classifier.

Decides, once per classifier instance, whether the current process is
"production" (read-only collections must stay read-only no matter what) or
an allowed context (debug build, migration, test run, development machine).

Manifesto:
    The classifier is a second, coarser gate in front of the suppression
    scope. Even with a scope open, a production verdict blocks writes.

    - **Computed once:** the first read classifies, every later read returns
      the same frozen result. A long-running process that changes context
      is *not* re-classified.
    - **Explicit instance:** build a ContextClassifier with injected signals
      and a HostInfo; the module-level default is only a convenience.
    - **Never raises:** ambiguity resolves to the production verdict.

Architecture:
    ::

        ContextClassifier(signals, host)
              │  first access (threading.Lock, at-most-once)
              ▼
        1. DEBUG signals            → allowed
        2. MIGRATION/TEST/DEV       → allowed      (dominate production)
        3. PRODUCTION signals       → production
        4. nothing fired            → production   (fail safe)
              │
              ▼
        ClassificationResult(is_production, is_allowed_context, reason, signal)

Examples:
    >>> host = HostInfo(loaded_modules=frozenset({"pytest"}),
    ...                 environ={"ENVIRONMENT": "Production"})
    >>> ContextClassifier(host=host).is_allowed_context
    True

Tags:
    environment-detection, production-guard, lazy-init, seedgate
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from seedgate.core.errors import ReadOnlyViolation
from seedgate.core.logging import get_logger
from seedgate.core.settings import SeedGateSettings, get_settings
from seedgate.detect.host import HostInfo
from seedgate.detect.signals import Signal, SignalKind, default_signals

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    """Immutable verdict of a :class:`ContextClassifier`."""

    is_production: bool
    is_allowed_context: bool
    reason: str
    signal: str | None = None
    kind: SignalKind | None = None

    def __post_init__(self) -> None:
        if self.is_production and self.is_allowed_context:
            raise ValueError("a context cannot be both production and allowed")

    @classmethod
    def allowed(cls, signal: Signal) -> ClassificationResult:
        return cls(
            is_production=False,
            is_allowed_context=True,
            reason=f"{signal.kind.value} context ({signal.name})",
            signal=signal.name,
            kind=signal.kind,
        )

    @classmethod
    def production(cls, signal: Signal | None = None) -> ClassificationResult:
        if signal is None:
            return cls(is_production=True, is_allowed_context=False, reason="no signal fired (default)")
        return cls(
            is_production=True,
            is_allowed_context=False,
            reason=f"production indicator ({signal.name})",
            signal=signal.name,
            kind=signal.kind,
        )

    @property
    def verdict(self) -> str:
        return "production" if self.is_production else "allowed"


@dataclass(frozen=True)
class SignalReport:
    """One line of :meth:`ContextClassifier.explain`."""

    name: str
    kind: SignalKind
    fired: bool


class ContextClassifier:
    """Lazily classify the execution context, exactly once.

    Parameters:
        signals: Signals to evaluate. Defaults to :func:`default_signals`.
            Order within a kind is preserved; all allowed-context signals
            are evaluated before any production signal.
        host: A fixed :class:`HostInfo`, or a callable producing one at
            classification time. Defaults to :meth:`HostInfo.from_runtime`.
        settings: Used to build the default signal set.
    """

    def __init__(
        self,
        signals: Sequence[Signal] | None = None,
        host: HostInfo | Callable[[], HostInfo] | None = None,
        settings: SeedGateSettings | None = None,
    ) -> None:
        if signals is None:
            signals = default_signals(settings or get_settings())
        self._allowed = [s for s in signals if s.kind.allows]
        self._production = [s for s in signals if not s.kind.allows]

        if host is None:
            self._host_provider: Callable[[], HostInfo] = HostInfo.from_runtime
        elif isinstance(host, HostInfo):
            self._host_provider = lambda: host
        else:
            self._host_provider = host

        self._result: ClassificationResult | None = None
        self._lock = threading.Lock()

    @property
    def signals(self) -> list[Signal]:
        return self._allowed + self._production

    @property
    def result(self) -> ClassificationResult:
        result = self._result
        if result is not None:
            return result
        with self._lock:
            if self._result is None:
                self._result = self._classify()
            return self._result

    @property
    def is_production_environment(self) -> bool:
        return self.result.is_production

    @property
    def is_allowed_context(self) -> bool:
        return self.result.is_allowed_context

    @property
    def is_classified(self) -> bool:
        return self._result is not None

    def _read_host(self) -> HostInfo:
        try:
            return self._host_provider()
        except Exception as exc:
            logger.warning("host_info_unreadable", error=repr(exc))
            return HostInfo()

    def _classify(self) -> ClassificationResult:
        host = self._read_host()
        result = self._decide(host)
        logger.info(
            "context_classified",
            verdict=result.verdict,
            reason=result.reason,
            signal=result.signal,
            process=host.process_name,
        )
        return result

    def _decide(self, host: HostInfo) -> ClassificationResult:
        for signal in self._allowed:
            if signal.evaluate(host):
                return ClassificationResult.allowed(signal)
        for signal in self._production:
            if signal.evaluate(host):
                return ClassificationResult.production(signal)
        return ClassificationResult.production()

    def explain(self) -> list[SignalReport]:
        """Evaluate every signal against a fresh host snapshot.

        Diagnostic only: does not touch or refresh the cached verdict.
        """
        host = self._read_host()
        return [SignalReport(s.name, s.kind, s.evaluate(host)) for s in self.signals]

    def validate_context(self, description: str = "developer-only operation") -> None:
        """Raise :class:`ReadOnlyViolation` when running in production."""
        result = self.result
        if result.is_production:
            logger.warning(
                "production_usage_blocked",
                operation=description,
                reason=result.reason,
            )
            raise ReadOnlyViolation(
                description,
                message=(
                    f"{description} bypasses read-only validation and is not allowed in a "
                    f"production environment ({result.reason}). Use it only from tests, "
                    "migrations or development environments."
                ),
            ).with_context(operation=description, verdict=result.verdict)


# ── Process default ──────────────────────────────────────────────────────

_default: ContextClassifier | None = None
_default_lock = threading.Lock()


def get_default_classifier() -> ContextClassifier:
    """Process-wide classifier built from the cached settings."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = ContextClassifier()
    return _default


def reset_default_classifier() -> None:
    """Forget the process-wide classifier (for testing only)."""
    global _default
    with _default_lock:
        _default = None


__all__ = [
    "ClassificationResult",
    "SignalReport",
    "ContextClassifier",
    "get_default_classifier",
    "reset_default_classifier",
]
