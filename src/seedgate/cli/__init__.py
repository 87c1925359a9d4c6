"""
CLI layer for seedgate.

Entry point::

    seedgate detect --explain
"""

from seedgate.cli.app import app

__all__ = ["app"]
