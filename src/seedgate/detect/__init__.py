"""Execution-context classification (production vs. allowed contexts)."""

from seedgate.detect.classifier import (
    ClassificationResult,
    ContextClassifier,
    SignalReport,
    get_default_classifier,
    reset_default_classifier,
)
from seedgate.detect.host import HostInfo
from seedgate.detect.signals import Signal, SignalKind, default_signals

__all__ = [
    "ClassificationResult",
    "ContextClassifier",
    "SignalReport",
    "get_default_classifier",
    "reset_default_classifier",
    "HostInfo",
    "Signal",
    "SignalKind",
    "default_signals",
]
