"""Shared helpers."""

from .debug import DebugLog, debug_log, configure_debug

__all__ = ["DebugLog", "debug_log", "configure_debug"]
