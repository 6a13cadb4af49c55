"""Candidate id-list cache with Redis primary and in-memory fallback.

Entries are plain JSON arrays of product ids keyed by query signature and
expire after a fixed TTL; nothing is invalidated before that.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence

import redis

from .config import Settings, settings

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 60.0


class CacheBackend(Protocol):
    def get_ids(self, key: str) -> Optional[List[int]]: ...

    def set_ids(self, key: str, ids: Sequence[int], ttl: int) -> None: ...


def _decode_ids(data: bytes | str) -> Optional[List[int]]:
    try:
        value = json.loads(data)
    except json.JSONDecodeError:
        return None
    if not isinstance(value, list) or not all(isinstance(item, int) for item in value):
        logger.warning("Ignoring malformed cached id list")
        return None
    return value


@dataclass
class RedisCache:
    client: redis.Redis

    def get_ids(self, key: str) -> Optional[List[int]]:
        try:
            data = self.client.get(key)
        except redis.RedisError as exc:
            logger.warning("Redis get failed: %s", exc)
            return None
        if data is None:
            return None
        return _decode_ids(data)

    def set_ids(self, key: str, ids: Sequence[int], ttl: int) -> None:
        try:
            self.client.setex(key, ttl, json.dumps([int(item) for item in ids]))
        except redis.RedisError as exc:
            logger.warning("Redis set failed: %s", exc)


class InMemoryCache:
    """Process-local fallback; expired entries are swept on write."""

    def __init__(self, sweep_interval: float = SWEEP_INTERVAL_SECONDS) -> None:
        self._store: Dict[str, tuple[float, tuple[int, ...]]] = {}
        self._lock = threading.Lock()
        self._sweep_interval = sweep_interval
        self._next_sweep = 0.0

    def get_ids(self, key: str) -> Optional[List[int]]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            expires_at, ids = entry
            if expires_at <= time.time():
                del self._store[key]
                return None
            return list(ids)

    def set_ids(self, key: str, ids: Sequence[int], ttl: int) -> None:
        now = time.time()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            self._store[key] = (now + ttl, tuple(int(item) for item in ids))

    def _sweep(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._store.items() if expires_at <= now]
        for key in expired:
            del self._store[key]
        self._next_sweep = now + self._sweep_interval
        if expired:
            logger.debug("cache sweep removed %s expired entries", len(expired))


_cache: CacheBackend | None = None


def get_cache(config: Settings = settings) -> CacheBackend:
    """Return the process-wide cache, probing Redis once on first use."""
    global _cache
    if _cache is not None:
        return _cache
    client = redis.Redis(host=config.redis_host, port=config.redis_port, socket_connect_timeout=2)
    try:
        client.ping()
    except redis.RedisError:
        logger.warning("Redis not available at %s:%s, using in-memory cache", config.redis_host, config.redis_port)
        _cache = InMemoryCache()
    else:
        logger.info("Using Redis cache at %s:%s", config.redis_host, config.redis_port)
        _cache = RedisCache(client)
    return _cache
