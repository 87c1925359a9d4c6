"""Read-only facade over a mutable collection.

:class:`ReadOnlyCollection` is what production code receives. Reads go
straight to the backing collection; every structural write goes through
:meth:`AccessGate.guard_mutation` first. The backing collection is injected
in the constructor and handed to the gate through the :attr:`backing`
accessor, so the gate never has to dig through private attributes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from operator import attrgetter
from typing import Any, Generic, TypeVar

from seedgate.core.protocols import MutableCollection, ReadOnlyEntity
from seedgate.gate.access import AccessGate

T = TypeVar("T", bound=ReadOnlyEntity)


class ReadOnlyCollection(Generic[T]):
    """A collection that rejects writes unless the gate permits them.

    Parameters:
        backing: The mutable collection being wrapped (1:1).
        gate: Gate enforcing read-only access.
        name: Name used in error messages and logs.
        key: Returns an entity's identity key. Defaults to ``entity.id``,
            the attribute every :class:`ReadOnlyEntity` carries.
    """

    def __init__(
        self,
        backing: MutableCollection[T],
        gate: AccessGate,
        name: str | None = None,
        key: Callable[[T], Any] = attrgetter("id"),
    ) -> None:
        self._backing = backing
        self.gate = gate
        self.name = name or getattr(backing, "name", None) or type(backing).__name__
        self._key = key

    @property
    def backing(self) -> MutableCollection[T]:
        return self._backing

    # -- Reads -------------------------------------------------------------

    def __iter__(self) -> Iterator[T]:
        return iter(self._backing)

    def __len__(self) -> int:
        return sum(1 for _ in self._backing)

    def __contains__(self, entity: object) -> bool:
        return any(item is entity or item == entity for item in self._backing)

    def query(self, predicate: Callable[[T], bool] | None = None) -> list[T]:
        if predicate is None:
            return list(self._backing)
        return [item for item in self._backing if predicate(item)]

    def first(self, predicate: Callable[[T], bool] | None = None) -> T | None:
        for item in self._backing:
            if predicate is None or predicate(item):
                return item
        return None

    def find(self, key: Any) -> T | None:
        return self.first(lambda item: self._key(item) == key)

    # -- Guarded writes ----------------------------------------------------

    def add(self, entity: T) -> None:
        self.gate.guard_mutation(f"add({self.name})")
        self._backing.add(entity)

    def add_many(self, entities: Iterable[T]) -> None:
        self.gate.guard_mutation(f"add_many({self.name})")
        for entity in entities:
            self._backing.add(entity)

    def update(self, entity: T) -> None:
        self.gate.guard_mutation(f"update({self.name})")
        self._backing.update(entity)

    def remove(self, entity: T) -> None:
        self.gate.guard_mutation(f"remove({self.name})")
        self._backing.remove(entity)

    def remove_many(self, entities: Iterable[T]) -> None:
        self.gate.guard_mutation(f"remove_many({self.name})")
        for entity in entities:
            self._backing.remove(entity)

    # -- Seeding -----------------------------------------------------------

    def create(self, factory: Callable[[], T] | None) -> T:
        return self.gate.create_guarded(self, factory)

    def create_many(self, factory: Callable[[], Iterable[T]] | None) -> list[T]:
        return self.gate.create_many_guarded(self, factory)

    async def create_async(self, factory: Callable[[], T] | None) -> T:
        return await self.gate.create_guarded_async(self, factory)

    async def create_many_async(self, factory: Callable[[], Iterable[T]] | None) -> list[T]:
        return await self.gate.create_many_guarded_async(self, factory)

    def __repr__(self) -> str:
        return f"ReadOnlyCollection({self.name!r})"


def as_read_only(
    backing: MutableCollection[T],
    gate: AccessGate,
    name: str | None = None,
    **kwargs: Any,
) -> ReadOnlyCollection[T]:
    """Wrap *backing* in a :class:`ReadOnlyCollection`."""
    return ReadOnlyCollection(backing, gate, name=name, **kwargs)


__all__ = [
    "ReadOnlyCollection",
    "as_read_only",
]
