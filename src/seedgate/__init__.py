"""
seedgate - guarded access to read-only data.

Production code reads read-only collections; tests and migrations seed them
through an explicit, reference-counted suppression scope, and only when the
execution context is not classified as production.

Quick start::

    from seedgate import AccessGate, ContextClassifier, ReadOnlyCollection
    from seedgate.stores import InMemoryCollection

    gate = AccessGate(classifier=ContextClassifier())
    companies = ReadOnlyCollection(InMemoryCollection(name="companies"), gate)

    with gate.enter_suppression_scope("fixture"):
        companies.create(lambda: Company(id=1, name="Acme"))
    companies.backing.save()
"""

__version__ = "0.1.0"

from seedgate.core import *  # noqa
from seedgate.detect import *  # noqa
from seedgate.gate import *  # noqa
