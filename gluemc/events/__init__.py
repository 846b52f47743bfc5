"""
Event system for gluemc.

Routes parsed log lines to the handlers registered for their event type.
"""

from .base import ParsedLine
from .dispatcher import EventDispatcher

__all__ = [
    "EventDispatcher",
    "ParsedLine",
]
