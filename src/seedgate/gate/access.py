"""
AccessGate - the enforcement point for read-only collections.

Manifesto:
    Read-only data should be impossible to change by accident and easy to
    seed on purpose. The gate combines two independent checks:

    - **Suppression scope:** a reference-counted, explicitly opened scope
      (``with gate.enter_suppression_scope(): ...``)
    - **Context verdict:** a :class:`ContextClassifier` that blocks writes
      in production even when a scope is open

    A write passes ``guard_mutation`` only when the verdict is not
    production AND (a scope is open OR ``require_scope`` is False).

Architecture:
    ::

        caller ── create_guarded(collection, factory)
                     │ factory is None?          → InvalidArgument
                     │ classifier: production?   → ReadOnlyViolation
                     │ guard_mutation            → ReadOnlyViolation
                     │ collection.backing        → CollaboratorAccessFailure
                     ▼
                  entity = factory(); backing.add(entity); return entity

        ReadOnlyCollection.add/update/remove ── guard_mutation ── backing

Policy for allowed contexts:
    ``require_scope=True`` (default): the scope is authoritative. An
    allowed context with no open scope is still rejected.
    ``require_scope=False``: an allowed context alone authorizes writes,
    which is how seeding helpers behave in fixtures that never open a scope.

Examples:
    >>> gate = AccessGate(classifier=ContextClassifier(host=test_host))
    >>> companies = ReadOnlyCollection(InMemoryCollection(), gate)
    >>> with gate.enter_suppression_scope():
    ...     companies.create(lambda: Company(id=1, name="Acme"))

Guardrails:
    ❌ DON'T: Catch ReadOnlyViolation to "try again without the gate"
    ✅ DO: Open a scope in the test/migration code that owns the write

    ❌ DON'T: Share one ProcessCounter gate across a multi-tenant server
    ✅ DO: Use the default context mode in concurrent services

Tags:
    read-only, access-control, suppression-scope, seeding, seedgate
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from seedgate.core.errors import CollaboratorAccessFailure, InvalidArgument, ReadOnlyViolation
from seedgate.core.logging import get_logger
from seedgate.core.protocols import AsyncAddable, MutableCollection
from seedgate.core.settings import ScopeMode, SeedGateSettings, get_settings
from seedgate.detect.classifier import ContextClassifier, get_default_classifier
from seedgate.gate.markers import production_usage
from seedgate.gate.suppression import SuppressionCounter, SuppressionScope, make_counter

logger = get_logger(__name__)

T = TypeVar("T")

_SEEDING_WARNING = "Bypasses read-only validation; use only in tests and migrations"


class AccessGate:
    """Guards mutations of read-only collections.

    Parameters:
        classifier: Context classifier consulted on every guarded write.
            Defaults to one built from *settings* when they are given,
            otherwise to the process-wide classifier.
        counter: Suppression counter. Defaults to one built from
            ``settings.scope_mode``.
        require_scope: Whether an open scope is required in allowed
            contexts. Defaults to ``settings.require_scope``.
        settings: Source of the defaults above.
    """

    def __init__(
        self,
        classifier: ContextClassifier | None = None,
        counter: SuppressionCounter | None = None,
        require_scope: bool | None = None,
        settings: SeedGateSettings | None = None,
    ) -> None:
        if classifier is None:
            classifier = get_default_classifier() if settings is None else ContextClassifier(settings=settings)
        settings = settings or get_settings()
        self.classifier = classifier
        self._counter = counter or make_counter(settings.scope_mode)
        self.require_scope = settings.require_scope if require_scope is None else require_scope

    @classmethod
    def process_wide(
        cls,
        classifier: ContextClassifier | None = None,
        *,
        require_scope: bool | None = None,
        settings: SeedGateSettings | None = None,
    ) -> AccessGate:
        """A gate whose scopes suppress enforcement for the whole process."""
        return cls(
            classifier=classifier,
            counter=make_counter(ScopeMode.PROCESS),
            require_scope=require_scope,
            settings=settings,
        )

    # -- Scopes ------------------------------------------------------------

    @property
    def depth(self) -> int:
        """Number of currently open suppression scopes."""
        return self._counter.depth

    @property
    def is_suppressed(self) -> bool:
        return self._counter.depth > 0

    @property
    def is_mutation_permitted(self) -> bool:
        if self.classifier.is_production_environment:
            return False
        return self.is_suppressed or not self.require_scope

    @production_usage("Suppresses read-only validation; use only in tests and migrations")
    def enter_suppression_scope(self, reason: str = "") -> SuppressionScope:
        """Open a suppression scope. Never fails.

        In production the scope still opens, but ``guard_mutation`` keeps
        rejecting writes; a warning is logged so the attempt is visible.
        """
        scope = SuppressionScope(self._counter, reason=reason)
        if self.classifier.is_production_environment:
            logger.warning(
                "suppression_scope_in_production",
                depth=scope.depth,
                reason=reason,
                verdict_reason=self.classifier.result.reason,
            )
        return scope

    def suppress_read_only_validation(self, reason: str = "") -> SuppressionScope:
        """Alias of :meth:`enter_suppression_scope`."""
        return self.enter_suppression_scope(reason)

    def allow_test_seeding(self, reason: str = "test seeding") -> SuppressionScope:
        """Alias of :meth:`enter_suppression_scope` for fixture code."""
        return self.enter_suppression_scope(reason)

    # -- Enforcement -------------------------------------------------------

    def guard_mutation(self, description: str) -> None:
        """Raise :class:`ReadOnlyViolation` unless a mutation is permitted."""
        result = self.classifier.result
        if result.is_production:
            self._reject(
                description,
                f"Read-only violation: {description} rejected in a production environment "
                f"({result.reason})",
                verdict=result.verdict,
            )
        if self.require_scope and not self.is_suppressed:
            self._reject(
                description,
                f"Read-only violation: {description} requires an open suppression scope",
                verdict=result.verdict,
            )

    def _reject(self, description: str, message: str, verdict: str) -> None:
        logger.warning(
            "read_only_violation",
            operation=description,
            verdict=verdict,
            depth=self.depth,
            require_scope=self.require_scope,
        )
        raise ReadOnlyViolation(description, message=message).with_context(
            operation=description, verdict=verdict
        )

    # -- Seeding -----------------------------------------------------------

    @production_usage(_SEEDING_WARNING)
    def create_guarded(self, collection: Any, factory: Callable[[], T] | None) -> T:
        """Build one entity with *factory* and stage it in *collection*.

        The entity is returned exactly as the factory produced it; identity
        assignment is the store's job, at ``save()``.
        """
        backing = self._prepare(collection, factory, "create")
        entity = factory()  # type: ignore[misc]
        backing.add(entity)
        logger.debug("entity_seeded", entity_type=type(entity).__name__)
        return entity

    @production_usage(_SEEDING_WARNING)
    def create_many_guarded(
        self, collection: Any, factory: Callable[[], Iterable[T]] | None
    ) -> list[T]:
        """Build entities with *factory* and stage each in *collection*."""
        backing = self._prepare(collection, factory, "create_many")
        entities = self._materialize(factory)
        for entity in entities:
            backing.add(entity)
        logger.debug("entities_seeded", count=len(entities))
        return entities

    @production_usage(_SEEDING_WARNING)
    async def create_guarded_async(self, collection: Any, factory: Callable[[], T] | None) -> T:
        """Async twin of :meth:`create_guarded` using ``add_async`` when available."""
        backing = self._prepare(collection, factory, "create")
        entity = factory()  # type: ignore[misc]
        await _add_async(backing, entity)
        return entity

    @production_usage(_SEEDING_WARNING)
    async def create_many_guarded_async(
        self, collection: Any, factory: Callable[[], Iterable[T]] | None
    ) -> list[T]:
        """Async twin of :meth:`create_many_guarded`."""
        backing = self._prepare(collection, factory, "create_many")
        entities = self._materialize(factory)
        for entity in entities:
            await _add_async(backing, entity)
        return entities

    def _prepare(self, collection: Any, factory: Callable[..., Any] | None, operation: str) -> MutableCollection:
        if factory is None:
            raise InvalidArgument("factory").with_context(operation=operation)
        name = _collection_name(collection)
        self.classifier.validate_context(f"{operation}({name})")
        self.guard_mutation(f"{operation}({name})")
        return backing_of(collection)

    @staticmethod
    def _materialize(factory: Callable[[], Iterable[T]]) -> list[T]:
        produced = factory()
        if produced is None:
            raise InvalidArgument("factory", message="Factory returned None instead of a sequence")
        if isinstance(produced, list):
            return produced
        return list(produced)


async def _add_async(backing: MutableCollection, entity: Any) -> None:
    if isinstance(backing, AsyncAddable):
        await backing.add_async(entity)
    else:
        backing.add(entity)


def _collection_name(collection: Any) -> str:
    name = getattr(collection, "name", None)
    return name if isinstance(name, str) else type(collection).__name__


def backing_of(collection: Any) -> MutableCollection:
    """Return the mutable collection behind a read-only facade.

    Raises:
        CollaboratorAccessFailure: *collection* exposes no ``backing``
            accessor, or the backing object is not a mutable collection.
    """
    try:
        backing = collection.backing
    except AttributeError as exc:
        raise CollaboratorAccessFailure(
            f"{type(collection).__name__} does not expose a backing collection",
            cause=exc,
        ) from exc
    if backing is None or not isinstance(backing, MutableCollection):
        raise CollaboratorAccessFailure(
            f"Backing collection of {type(collection).__name__} is missing or does not "
            f"implement add/remove/update/save (got {type(backing).__name__})"
        )
    return backing


__all__ = [
    "AccessGate",
    "backing_of",
]
