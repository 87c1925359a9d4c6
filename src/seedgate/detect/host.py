"""Ambient process information consumed by classifier signals.

:class:`HostInfo` is the only place seedgate reads the host runtime:
environment variables, the process/entry-point name, command-line
arguments, loaded modules and the active call stack. Signals receive a
``HostInfo`` instead of touching ``os``/``sys`` themselves, so tests build
one with fixed values and never depend on the real process.
"""

from __future__ import annotations

import os
import sys
import traceback
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import PurePath

# (function name, owner name) pairs; owner is the qualified name prefix or module
Frame = tuple[str, str]


def current_process_name() -> str:
    """Best-effort name of the running program.

    ``python -m alembic`` reports the module (``alembic``); a console script
    reports its file stem (``pytest``); an interactive interpreter reports
    the interpreter's own name.
    """
    main = sys.modules.get("__main__")
    spec = getattr(main, "__spec__", None)
    if spec is not None and getattr(spec, "name", None):
        name = spec.name
        return name.removesuffix(".__main__")
    if sys.argv and sys.argv[0]:
        return PurePath(sys.argv[0]).stem
    return PurePath(sys.executable or "python").stem


def walk_call_stack() -> Iterator[Frame]:
    """Yield ``(function, owner)`` for each frame of the current call stack.

    The walk starts at the frame that iterates this generator. The owner is
    the class part of ``co_qualname`` when the function is a method,
    otherwise the module name.
    """
    # walk_stack(None) skips a version-dependent number of frames
    for frame, _lineno in traceback.walk_stack(sys._getframe(1)):
        code = frame.f_code
        qualname = getattr(code, "co_qualname", code.co_name)
        owner, _, _ = qualname.rpartition(".")
        if not owner or owner.endswith("<locals>"):
            owner = frame.f_globals.get("__name__", "")
        yield code.co_name, owner


@dataclass(frozen=True)
class HostInfo:
    """Snapshot of ambient process information.

    ``frames`` is a callable so the (slow) stack walk only happens when the
    call-stack signal actually runs.
    """

    environ: Mapping[str, str] = field(default_factory=dict)
    process_name: str = ""
    argv: tuple[str, ...] = ()
    loaded_modules: frozenset[str] = frozenset()
    frames: Callable[[], Iterable[Frame]] = field(default=lambda: ())
    dev_mode: bool = False

    @classmethod
    def from_runtime(cls) -> HostInfo:
        """Capture the live process."""
        return cls(
            environ=dict(os.environ),
            process_name=current_process_name(),
            argv=tuple(sys.argv),
            loaded_modules=frozenset(sys.modules),
            frames=walk_call_stack,
            dev_mode=bool(sys.flags.dev_mode),
        )

    def getenv(self, name: str) -> str | None:
        return self.environ.get(name)

    def top_level_modules(self) -> frozenset[str]:
        return frozenset(name.partition(".")[0] for name in self.loaded_modules)


__all__ = [
    "Frame",
    "HostInfo",
    "current_process_name",
    "walk_call_stack",
]
