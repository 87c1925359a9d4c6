"""SQLAlchemy-session-backed mutable collection.

Manifesto:
    Read-only reference tables usually live in the same database as
    everything else and are reached through the same ORM session. Wrapping
    one mapped model of a session gives seedgate a real unit of work to
    guard without owning any persistence code.

This module provides:

* ``create_seedgate_engine``  -- SA engine with SQLite pragmas applied.
* ``SeedGateSession``         -- ``Session`` with ``expire_on_commit=False``.
* ``SessionCollection``       -- one mapped model of a session, shaped like
  ``seedgate.core.protocols.MutableCollection``.

Tags:
    seedgate, orm, sqlalchemy, session, collection
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Generic, TypeVar

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

T = TypeVar("T")


def create_seedgate_engine(url: str = "sqlite:///:memory:", *, echo: bool = False, **kwargs: Any) -> Engine:
    """Create a SQLAlchemy engine with sane defaults."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = _sa_create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return _sa_create_engine(url, echo=echo, **kwargs)


class SeedGateSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Seeded entities stay readable after ``save()`` without a refresh.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def seedgate_session_factory(engine: Engine) -> sessionmaker[SeedGateSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``SeedGateSession`` instances."""
    return sessionmaker(bind=engine, class_=SeedGateSession)


class SessionCollection(Generic[T]):
    """Adapter exposing one mapped *model* of a ``Session`` as a mutable collection.

    ``add``/``remove``/``update`` stage changes in the session; ``save``
    commits and returns the number of staged objects flushed.
    """

    def __init__(self, session: Session, model: type[T], name: str | None = None) -> None:
        self._session = session
        self.model = model
        self.name = name or getattr(model, "__tablename__", model.__name__)

    def add(self, entity: T) -> None:
        self._session.add(entity)

    def update(self, entity: T) -> None:
        self._session.merge(entity)

    def remove(self, entity: T) -> None:
        self._session.delete(entity)

    def save(self) -> int:
        staged = len(self._session.new) + len(self._session.dirty) + len(self._session.deleted)
        self._session.commit()
        return staged

    def get(self, key: Any) -> T | None:
        return self._session.get(self.model, key)

    def __iter__(self) -> Iterator[T]:
        return iter(self._session.scalars(select(self.model)).all())

    @property
    def session(self) -> Session:
        """Access the underlying SA session (e.g., for ORM queries)."""
        return self._session


__all__ = [
    "create_seedgate_engine",
    "SeedGateSession",
    "seedgate_session_factory",
    "SessionCollection",
]
