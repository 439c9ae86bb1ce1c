"""Utility helpers for the NES emulator."""

from .debug import debug_enabled, debug_log, enabled_categories, reload_categories
from .trace import TraceEntry, TraceRecorder

__all__ = [
    "debug_enabled",
    "debug_log",
    "enabled_categories",
    "reload_categories",
    "TraceEntry",
    "TraceRecorder",
]
