"""Bounded cache for synthesized speech."""

import time
import logging
import threading
from collections import OrderedDict
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class SpeechCache:
    """Least-recently-used map of cache key -> audio bytes with optional expiry."""

    def __init__(self, capacity: int = 256, ttl_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize speech cache.

        Args:
            capacity: Maximum number of entries kept; the least recently used goes first
            ttl_seconds: Entries older than this are treated as missing; None disables expiry
            clock: Monotonic time source
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[bytes, float]]" = OrderedDict()
        self.lock = threading.Lock()

        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: str) -> Optional[bytes]:
        with self.lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            audio, stored_at = entry
            if self.ttl_seconds is not None and self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                logger.debug(f"Speech cache entry expired: {key[:40]!r}")
                return None

            self._entries.move_to_end(key)
            self.hits += 1
            return audio

    def put(self, key: str, audio: bytes) -> None:
        with self.lock:
            self._entries[key] = (audio, self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                self.evictions += 1
                logger.debug(f"Speech cache evicted: {evicted[:40]!r}")

    def clear(self) -> None:
        with self.lock:
            self._entries.clear()
        logger.debug("Speech cache cleared")

    def __contains__(self, key: str) -> bool:
        with self.lock:
            return key in self._entries

    def __len__(self) -> int:
        with self.lock:
            return len(self._entries)

    def get_stats(self) -> dict:
        with self.lock:
            return {
                "entries": len(self._entries),
                "capacity": self.capacity,
                "ttl_seconds": self.ttl_seconds,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
            }
