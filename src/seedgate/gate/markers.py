"""Markers for APIs that must not be used from production code.

``@production_usage`` records a :class:`ProductionUsage` marker on a
function or class so linters, docs and tests can find every seeding
escape hatch. With ``always_warn=True`` each call also logs a warning.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from seedgate.core.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

MARKER_ATTRIBUTE = "__production_usage__"


@dataclass(frozen=True)
class ProductionUsage:
    message: str = "This API is not intended for production use"
    always_warn: bool = False


def production_usage(
    message: str = "This API is not intended for production use",
    always_warn: bool = False,
) -> Callable[[F], F]:
    """Mark a function or class as a non-production API."""
    marker = ProductionUsage(message, always_warn)

    def decorator(obj: F) -> F:
        if not always_warn or inspect.isclass(obj):
            setattr(obj, MARKER_ATTRIBUTE, marker)
            return obj

        if inspect.iscoroutinefunction(obj):

            @functools.wraps(obj)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                logger.warning("production_usage_called", api=obj.__qualname__, message=message)
                return await obj(*args, **kwargs)

            setattr(async_wrapper, MARKER_ATTRIBUTE, marker)
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(obj)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger.warning("production_usage_called", api=obj.__qualname__, message=message)
            return obj(*args, **kwargs)

        setattr(wrapper, MARKER_ATTRIBUTE, marker)
        return wrapper  # type: ignore[return-value]

    return decorator


def get_production_usage(obj: Any) -> ProductionUsage | None:
    """Return the marker attached to *obj* (or its underlying function)."""
    target = getattr(obj, "__func__", obj)
    return getattr(target, MARKER_ATTRIBUTE, None)


__all__ = [
    "ProductionUsage",
    "production_usage",
    "get_production_usage",
]
