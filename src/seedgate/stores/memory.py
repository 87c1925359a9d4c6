"""In-memory mutable collection.

Stages adds and removals until :meth:`InMemoryCollection.save` is called,
the same unit-of-work shape as an ORM session. Useful for unit tests and
for wiring seedgate before a real store exists.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from operator import attrgetter
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class InMemoryCollection(Generic[T]):
    """Dict-backed collection keyed by each entity's identity.

    Iteration yields committed entities only. ``add`` of an entity whose key
    is already committed replaces it on save.
    """

    def __init__(self, name: str = "memory", key: Callable[[T], Any] = attrgetter("id")) -> None:
        self.name = name
        self._key = key
        self._items: dict[Any, T] = {}
        self._pending_add: list[T] = []
        self._pending_remove: list[T] = []
        self._lock = threading.RLock()
        self.add_calls = 0

    def add(self, entity: T) -> None:
        with self._lock:
            self.add_calls += 1
            self._pending_add.append(entity)

    async def add_async(self, entity: T) -> None:
        self.add(entity)

    def update(self, entity: T) -> None:
        with self._lock:
            self._pending_add.append(entity)

    def remove(self, entity: T) -> None:
        with self._lock:
            self._pending_remove.append(entity)

    def save(self) -> int:
        """Commit staged changes, returning the number of entities affected."""
        with self._lock:
            changed = 0
            for entity in self._pending_add:
                self._items[self._key(entity)] = entity
                changed += 1
            for entity in self._pending_remove:
                if self._items.pop(self._key(entity), None) is not None:
                    changed += 1
            self._pending_add.clear()
            self._pending_remove.clear()
            return changed

    @property
    def pending(self) -> int:
        return len(self._pending_add) + len(self._pending_remove)

    def get(self, key: Any) -> T | None:
        return self._items.get(key)

    def __iter__(self) -> Iterator[T]:
        with self._lock:
            return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["InMemoryCollection"]
