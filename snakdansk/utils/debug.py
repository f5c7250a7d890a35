"""Debug-gated diagnostic channels.

Each channel is a child of the ``snakdansk.debug`` logger and only emits when
debug mode is on (``DEBUG_MODE=true`` or ``debug: true`` in the config file).
"""

import logging
import os
import time
from typing import Any, Optional

logger = logging.getLogger(__name__)


class DebugLog:
    """Verbose diagnostics for the transcription, chat and speech stages."""

    def __init__(self, enabled: bool = False, name: str = "snakdansk.debug"):
        self.enabled = enabled
        self._transcription = logging.getLogger(f"{name}.transcription")
        self._chat = logging.getLogger(f"{name}.chat")
        self._speech = logging.getLogger(f"{name}.speech")
        self._timing = logging.getLogger(f"{name}.timing")
        self._error = logging.getLogger(f"{name}.error")

    def _emit(self, channel: logging.Logger, message: str, data: Optional[Any]) -> None:
        if not self.enabled:
            return
        if data is not None:
            channel.debug("%s | data=%r", message, data)
        else:
            channel.debug("%s", message)

    def transcription(self, message: str, data: Optional[Any] = None) -> None:
        self._emit(self._transcription, message, data)

    def chat(self, message: str, data: Optional[Any] = None) -> None:
        self._emit(self._chat, message, data)

    def speech(self, message: str, data: Optional[Any] = None) -> None:
        self._emit(self._speech, message, data)

    def timing(self, start: float, label: str) -> None:
        """Log the time elapsed since ``start`` (a ``time.monotonic()`` value)."""
        if self.enabled:
            self._timing.debug("%s: %dms", label, (time.monotonic() - start) * 1000)

    def error(self, error: BaseException, context: str) -> None:
        if self.enabled:
            self._error.debug("%s: %s", context, error, exc_info=error)


debug_log = DebugLog(enabled=os.environ.get("DEBUG_MODE", "").lower() == "true")


def configure_debug(enabled: bool) -> DebugLog:
    """Switch the shared debug log on or off."""
    debug_log.enabled = enabled
    # channels log at DEBUG, so they must not inherit a quieter root level
    logging.getLogger("snakdansk.debug").setLevel(logging.DEBUG if enabled else logging.NOTSET)
    logger.info(f"Debug diagnostics {'enabled' if enabled else 'disabled'}")
    return debug_log
