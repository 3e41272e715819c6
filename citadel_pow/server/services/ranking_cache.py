"""
In-process TTL cache for category rankings.

Keys follow ``rankings:{type}:{category}:{limit}``. Writes to sessions or
donations of a category invalidate that category and every ``all`` key.
Invalidation failures are logged and never propagate to the request.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from citadel_pow.core.logging_config import get_logger
from citadel_pow.server.core.config import settings

logger = get_logger(__name__)

KEY_PREFIX = "rankings"


def ranking_cache_key(ranking_type: str, category: str, limit: int) -> str:
    return f"{KEY_PREFIX}:{ranking_type}:{category}:{limit}"


class RankingCache:
    """Thread-safe dictionary of values that expire ``ttl_seconds`` after being set."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def invalidate_all(self) -> None:
        try:
            with self._lock:
                removed = len(self._entries)
                self._entries.clear()
            logger.info(f"Invalidated {removed} ranking cache keys")
        except Exception as e:
            logger.error(f"Failed to invalidate ranking cache: {e}")

    def invalidate_category(self, category: Optional[str]) -> None:
        """Drop cached rankings of ``category`` and of ``all``, for every type and limit."""
        if not category:
            return
        try:
            with self._lock:
                stale = [key for key in self._entries if self._key_category(key) in (category, "all")]
                for key in stale:
                    del self._entries[key]
            logger.info(f"Invalidated ranking cache for category: {category}")
        except Exception as e:
            logger.error(f"Failed to invalidate ranking cache: {e}")

    @staticmethod
    def _key_category(key: str) -> Optional[str]:
        # Category is everything between the type and the trailing limit
        prefix, _, rest = key.partition(":")
        ranking_type, _, rest = rest.partition(":")
        category, _, limit = rest.rpartition(":")
        if prefix != KEY_PREFIX or not ranking_type or not category or not limit.isdigit():
            return None
        return category


ranking_cache = RankingCache(settings.rankings.cache_ttl_seconds)
