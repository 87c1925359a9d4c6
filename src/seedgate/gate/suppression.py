"""Reference-counted suppression of read-only enforcement.

Two counter implementations share one interface:

* :class:`ContextCounter` keeps the open scopes in a
  :class:`contextvars.ContextVar`. Each asyncio task (and each thread) sees
  the scopes of the context it was started in. Required when the gate runs
  inside a concurrent server.
* :class:`ProcessCounter` is one integer for the whole process, guarded by a
  lock. Simple, but a scope opened by one test suppresses enforcement for
  every concurrent caller.

A :class:`SuppressionScope` is the handle returned when a scope is entered.
It owns a :class:`ScopeToken`; releasing marks that token, so a scope can be
released from any thread, task or copied context and every context that saw
it open stops being suppressed.
"""

from __future__ import annotations

import contextvars
import itertools
import threading
from typing import Protocol

from seedgate.core.logging import get_logger
from seedgate.core.settings import ScopeMode

logger = get_logger(__name__)

_counter_ids = itertools.count()


class ScopeToken:
    """One open suppression scope. Closes at most once."""

    __slots__ = ("_lock", "released")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.released = False

    def close(self) -> bool:
        """Mark released; False if it already was."""
        with self._lock:
            if self.released:
                return False
            self.released = True
            return True


class SuppressionCounter(Protocol):
    def enter(self) -> ScopeToken: ...

    def release(self, token: ScopeToken) -> int: ...

    @property
    def depth(self) -> int: ...


class ContextCounter:
    """Open scopes stored as an immutable chain in a context variable.

    A task spawned inside a scope inherits the chain, so it is suppressed
    exactly as long as the scope stays open, wherever it is released.
    """

    def __init__(self) -> None:
        self._var: contextvars.ContextVar[tuple[ScopeToken, ...]] = contextvars.ContextVar(
            f"seedgate_suppression_{next(_counter_ids)}", default=()
        )

    def enter(self) -> ScopeToken:
        token = ScopeToken()
        # drop tokens released elsewhere so the chain stays short
        self._var.set(tuple(t for t in self._var.get() if not t.released) + (token,))
        return token

    def release(self, token: ScopeToken) -> int:
        return self.depth

    @property
    def depth(self) -> int:
        return sum(1 for t in self._var.get() if not t.released)


class ProcessCounter:
    """Process-wide counter shared by every thread and task."""

    def __init__(self) -> None:
        self._depth = 0
        self._lock = threading.Lock()

    def enter(self) -> ScopeToken:
        with self._lock:
            self._depth += 1
        return ScopeToken()

    def release(self, token: ScopeToken) -> int:
        with self._lock:
            self._depth -= 1
            return self._depth

    @property
    def depth(self) -> int:
        return self._depth


def make_counter(mode: ScopeMode) -> SuppressionCounter:
    if mode == ScopeMode.PROCESS:
        return ProcessCounter()
    return ContextCounter()


class SuppressionScope:
    """Handle for an open suppression scope.

    Usable directly (``scope.release()``) or as a sync/async context
    manager. Releasing more than once has no further effect.
    """

    def __init__(self, counter: SuppressionCounter, reason: str = "") -> None:
        self._counter = counter
        self.reason = reason
        self._token = counter.enter()
        self.depth = counter.depth
        logger.debug("suppression_scope_opened", depth=self.depth, reason=reason)

    @property
    def active(self) -> bool:
        return not self._token.released

    def release(self) -> None:
        if not self._token.close():
            return
        remaining = self._counter.release(self._token)
        logger.debug("suppression_scope_released", remaining=remaining, reason=self.reason)

    def __enter__(self) -> SuppressionScope:
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    async def __aenter__(self) -> SuppressionScope:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "active" if self.active else "released"
        return f"SuppressionScope(depth={self.depth}, {state})"


__all__ = [
    "ScopeToken",
    "SuppressionCounter",
    "ContextCounter",
    "ProcessCounter",
    "make_counter",
    "SuppressionScope",
]
