"""seedgate core -- errors, logging, settings and collaborator protocols.

Architecture::

    errors.py       SeedGateError hierarchy (ReadOnlyViolation, InvalidArgument, ...)
    logging.py      structlog configuration (configure_logging, get_logger)
    settings.py     SeedGateSettings (pydantic-settings) + get_settings()
    protocols.py    MutableCollection, AsyncAddable, BackedCollection, ReadOnlyEntity
"""

from seedgate.core.errors import (
    CollaboratorAccessFailure,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidArgument,
    ReadOnlyViolation,
    SeedGateError,
    categorize_error,
)
from seedgate.core.logging import configure_logging, get_logger
from seedgate.core.protocols import AsyncAddable, BackedCollection, MutableCollection, ReadOnlyEntity
from seedgate.core.settings import BuildProfile, ScopeMode, SeedGateSettings, get_settings

__all__ = [
    "CollaboratorAccessFailure",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidArgument",
    "ReadOnlyViolation",
    "SeedGateError",
    "categorize_error",
    "configure_logging",
    "get_logger",
    "AsyncAddable",
    "BackedCollection",
    "MutableCollection",
    "ReadOnlyEntity",
    "BuildProfile",
    "ScopeMode",
    "SeedGateSettings",
    "get_settings",
]
