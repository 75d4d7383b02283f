"""Messaging module providing platform-agnostic abstractions.

This module defines the outbound notifier interface that allows swapping
messaging platforms without changing call sites.
"""

from src.messaging.base import Notifier

__all__ = [
    "Notifier",
]
