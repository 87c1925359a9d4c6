"""
Structured error types for seedgate.

Every failure the gate can produce is a programmer or wiring error, never a
transient condition. The hierarchy exists so callers can tell *which* rule
they broke and so log pipelines get the same structured fields for every
violation.

Manifesto:
    - **Loud violations:** Errors are raised at the point of violation and
      never downgraded to a logged warning
    - **Never retryable:** Retrying a read-only violation cannot succeed
    - **Rich Context:** Errors carry the operation, collection and verdict
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       SeedGateError                             │
        │  (category, retryable=False, context, cause)                    │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                 │
        │  ReadOnlyViolation       InvalidArgument      ConfigError       │
        │  (ACCESS,                (VALIDATION,         (CONFIG)          │
        │   PermissionError)        ValueError)                           │
        │                                                                 │
        │  CollaboratorAccessFailure                                      │
        │  (INTERNAL: facade/backing wiring mismatch)                     │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ReadOnlyViolation("add(Company)")
    >>> error.retryable
    False
    >>> error.with_context(collection="companies").context.collection
    'companies'

Guardrails:
    ❌ DON'T: Catch ReadOnlyViolation and continue
    ✅ DO: Open a suppression scope in test or migration code instead

    ❌ DON'T: Retry CollaboratorAccessFailure
    ✅ DO: Fix the facade wiring, it is a structural defect

Tags:
    error-handling, exception-hierarchy, read-only, seedgate
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    ACCESS = "ACCESS"             # Mutation without authorization
    VALIDATION = "VALIDATION"     # Bad or missing argument
    CONFIG = "CONFIG"             # Invalid settings
    INTERNAL = "INTERNAL"         # Wiring defects, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: The attempted operation (e.g. ``"add"``, ``"create_many"``)
        collection: Name of the read-only collection involved
        entity_type: Type name of the entity involved
        verdict: Classifier verdict at the time of the error
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    collection: str | None = None
    entity_type: str | None = None
    verdict: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten to log fields, dropping unset attributes."""
        result = {k: v for k, v in asdict(self).items() if k != "metadata" and v is not None}
        result.update(self.metadata)
        return result


_CONTEXT_FIELDS = frozenset(f.name for f in fields(ErrorContext)) - {"metadata"}


class SeedGateError(Exception):
    """
    Base exception for all seedgate errors.

    Subclasses set ``default_category``. ``retryable`` is always False:
    every seedgate error is a wiring or policy problem that a retry cannot
    fix.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SeedGateError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ReadOnlyViolation("add(Company)").with_context(
                collection="companies",
                verdict="production",
            )
        """
        for key, value in kwargs.items():
            if key in _CONTEXT_FIELDS:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# ACCESS ERRORS
# =============================================================================


class ReadOnlyViolation(SeedGateError, PermissionError):
    """
    Mutation attempted on a read-only collection without authorization.

    Raised when no suppression scope is open, or when the execution context
    was classified as production regardless of scope state.
    """

    default_category = ErrorCategory.ACCESS

    def __init__(self, description: str, message: str | None = None, **kwargs: Any):
        self.description = description
        super().__init__(
            message or f"Read-only violation: {description} is not permitted outside a suppression scope",
            **kwargs,
        )


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class InvalidArgument(SeedGateError, ValueError):
    """A required argument (usually a factory callable) was missing."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, argument: str, message: str | None = None, **kwargs: Any):
        self.argument = argument
        super().__init__(message or f"Argument '{argument}' is required", **kwargs)


# =============================================================================
# WIRING / CONFIG ERRORS
# =============================================================================


class CollaboratorAccessFailure(SeedGateError):
    """
    The backing mutable collection could not be reached through a facade.

    This is an integration defect between seedgate and the data-access
    layer, never a runtime condition.
    """

    default_category = ErrorCategory.INTERNAL


class ConfigError(SeedGateError):
    """Configuration value is invalid."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, SeedGateError):
        return error.category
    if isinstance(error, PermissionError):
        return ErrorCategory.ACCESS
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SeedGateError",
    "ReadOnlyViolation",
    "InvalidArgument",
    "CollaboratorAccessFailure",
    "ConfigError",
    "categorize_error",
]
