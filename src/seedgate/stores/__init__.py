"""Reference implementations of the mutable-collection collaborator.

``SessionCollection`` needs SQLAlchemy and is imported from
``seedgate.stores.session`` directly.
"""

from seedgate.stores.memory import InMemoryCollection

__all__ = ["InMemoryCollection"]
