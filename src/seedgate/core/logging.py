"""
seedgate logging - structured logging for gate decisions.

Every violation, classification and suppression scope is emitted as a
structured event so that an unexpected write attempt in a deployed service
is visible in log aggregation, not only in the raised exception.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="seedgate")
            ↓
        structlog processor chain:
          1. merge_contextvars           (LogContext / bind_context)
          2. TimeStamper (iso)
          3. add_log_level / add_logger_name
          4. _add_service_fields
          5. _add_gate_outcome           (denied / allowed for gate events)
          6. _rename_ecs_fields          (JSON only)
          7. JSONRenderer or ConsoleRenderer

        logger = get_logger(__name__)
        logger.warning("read_only_violation", operation="add(companies)")

Examples:
    >>> from seedgate.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> get_logger(__name__).debug("suppression_scope_opened", depth=1)

Tags:
    logging, structlog, observability, seedgate
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from seedgate.core.errors import ConfigError

_SERVICE_NAME = "seedgate"

# Gate events and the ECS ``event.outcome`` they report
_GATE_OUTCOMES = {
    "read_only_violation": "denied",
    "production_usage_blocked": "denied",
    "suppression_scope_in_production": "denied",
    "suppression_scope_opened": "allowed",
    "entity_seeded": "allowed",
    "entities_seeded": "allowed",
}

_ECS_FIELDS = {
    "timestamp": "@timestamp",
    "level": "log.level",
    "logger": "log.logger",
}


def _add_service_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _add_gate_outcome(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag access decisions so dashboards can count denials."""
    outcome = _GATE_OUTCOMES.get(event_dict.get("event", ""))
    if outcome is not None:
        event_dict.setdefault("event.outcome", outcome)
    return event_dict


def _rename_ecs_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for plain, ecs in _ECS_FIELDS.items():
        if plain in event_dict:
            event_dict[ecs] = event_dict.pop(plain)
    return event_dict


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ConfigError("log_level", level, f"Unknown log level {level!r}")
    return number


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "seedgate",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog (and the stdlib root handler) for seedgate.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_format: JSON lines when True, colored console output when
            False; None picks JSON unless stderr is a terminal.
        service: Value of the ``service.name`` field.
        add_timestamp: Prepend an ISO timestamp.

    Raises:
        ConfigError: *level* is not a standard logging level name.
    """
    global _SERVICE_NAME
    threshold = _level_number(level)
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [structlog.contextvars.merge_contextvars]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_fields,
        _add_gate_outcome,
    ]
    if json_format:
        processors += [_rename_ecs_fields, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout is reserved for command output (detect --json)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=threshold)


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, normally ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind log fields for the duration of a block.

    Values that were bound before entering are restored on exit, so nested
    contexts (a migration wrapping a fixture) behave as expected::

        with LogContext(migration="0003_companies"):
            with LogContext(fixture="seed_companies"):
                companies.create(build_company)
    """

    def __init__(self, **fields: Any) -> None:
        self._fields = fields
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._fields)
        return self

    def __exit__(self, *exc_info) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *exc_info) -> None:
        self.__exit__(*exc_info)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
