"""
Schedule search cache.

Search results are cached per (origin, destination, date, time) for a fixed
TTL. Seat counts inside a cached result are a point-in-time estimate only:
bookings do not invalidate entries, and the authoritative capacity check
happens inside the reservation's conditional update.
"""

import copy
import json
import logging
import threading
import time
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

import redis

from src.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

CACHE_PREFIX = "schedules"


def search_cache_key(from_station_id: int, to_station_id: int, journey_date: date, departure_after: Optional[str] = None) -> str:
    return f"{CACHE_PREFIX}:search:{from_station_id}:{to_station_id}:{journey_date.isoformat()}:{departure_after or 'all'}"


class InMemorySearchCache:
    """Process-local TTL cache"""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, List[Dict[str, Any]]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[List[Dict[str, Any]]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    def set(self, key: str, value: List[Dict[str, Any]]):
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, copy.deepcopy(value))

    def clear(self):
        with self._lock:
            self._entries.clear()


class RedisSearchCache:
    """Redis-backed cache shared between application processes"""

    def __init__(self, client: redis.Redis, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def get(self, key: str) -> Optional[List[Dict[str, Any]]]:
        try:
            raw = self.client.get(key)
        except redis.RedisError:
            logger.warning("Search cache read failed, falling back to database", extra={"cache_key": key}, exc_info=True)
            return None
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: List[Dict[str, Any]]):
        try:
            self.client.setex(key, self.ttl_seconds, json.dumps(value))
        except redis.RedisError:
            logger.warning("Search cache write failed", extra={"cache_key": key}, exc_info=True)

    def clear(self):
        for key in self.client.scan_iter(match=f"{CACHE_PREFIX}:search:*"):
            self.client.delete(key)


def build_search_cache(config: Settings = default_settings):
    """Create the cache backend selected by SEARCH_CACHE_BACKEND"""
    backend = config.SEARCH_CACHE_BACKEND.lower()
    if backend == "memory":
        return InMemorySearchCache(config.SEARCH_CACHE_TTL_SECONDS)
    if backend == "redis":
        client = redis.Redis.from_url(config.REDIS_URL, decode_responses=True, socket_connect_timeout=5)
        return RedisSearchCache(client, config.SEARCH_CACHE_TTL_SECONDS)
    raise ValueError(f"Unsupported SEARCH_CACHE_BACKEND: {config.SEARCH_CACHE_BACKEND}")


search_cache = build_search_cache()
