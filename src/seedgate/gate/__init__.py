"""Suppression scopes, the access gate and the read-only collection facade."""

from seedgate.gate.access import AccessGate, backing_of
from seedgate.gate.collections import ReadOnlyCollection, as_read_only
from seedgate.gate.markers import ProductionUsage, get_production_usage, production_usage
from seedgate.gate.suppression import ContextCounter, ProcessCounter, SuppressionScope

__all__ = [
    "AccessGate",
    "backing_of",
    "ReadOnlyCollection",
    "as_read_only",
    "ProductionUsage",
    "get_production_usage",
    "production_usage",
    "ContextCounter",
    "ProcessCounter",
    "SuppressionScope",
]
