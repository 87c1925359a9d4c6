"""
Canonical protocol definitions for seedgate.

seedgate never owns persistence. It is written against the smallest shape
a data-access layer can offer, and everything here is structural: any
object with the right methods satisfies the contract without inheriting
from seedgate.

Architecture:
    ::

        protocols.py
        ├── ReadOnlyEntity      — anything with an identity key
        ├── MutableCollection   — add / remove / update / save / iterate
        ├── AsyncAddable        — optional add_async for async stores
        └── BackedCollection    — a facade exposing its backing collection

    Implementations:
        seedgate.stores.memory.InMemoryCollection   (MutableCollection, AsyncAddable)
        seedgate.stores.session.SessionCollection   (MutableCollection)
        seedgate.gate.collections.ReadOnlyCollection (BackedCollection)

Guardrails:
    ❌ DON'T: Have seedgate call ``save()`` on the caller's behalf
    ✅ DO: Let the caller commit after seeding

    ❌ DON'T: Locate the backing collection by introspecting private attributes
    ✅ DO: Inject it into the facade and read it through ``backing``

Tags:
    protocol, collection, repository, contracts, seedgate
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class ReadOnlyEntity(Protocol):
    """A record exposed through a read-only collection. Only its key matters."""

    id: Any


@runtime_checkable
class MutableCollection(Protocol[T]):
    """
    Minimal synchronous collection interface of the data-access layer.

    ``add``/``remove``/``update`` stage changes; ``save`` commits them and is
    always invoked by the caller, never by seedgate.
    """

    def add(self, entity: T) -> None:
        ...

    def remove(self, entity: T) -> None:
        ...

    def update(self, entity: T) -> None:
        ...

    def save(self) -> int:
        ...

    def __iter__(self) -> Iterator[T]:
        ...


@runtime_checkable
class AsyncAddable(Protocol[T]):
    """Optional async staging operation."""

    async def add_async(self, entity: T) -> None:
        ...


@runtime_checkable
class BackedCollection(Protocol[T]):
    """A read-only facade that can hand its backing collection to the gate."""

    @property
    def backing(self) -> MutableCollection[T] | None:
        ...


__all__ = [
    "ReadOnlyEntity",
    "MutableCollection",
    "AsyncAddable",
    "BackedCollection",
]
