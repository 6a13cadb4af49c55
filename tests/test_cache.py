"""Tests for the id-list cache backends."""

from unittest.mock import MagicMock

import redis

from inventory_api import cache as cache_module
from inventory_api.cache import InMemoryCache, RedisCache


def test_in_memory_cache_round_trip():
    cache = InMemoryCache()
    cache.set_ids("inv_search_a", [3, 1, 2], 300)

    assert cache.get_ids("inv_search_a") == [3, 1, 2]
    assert cache.get_ids("inv_search_missing") is None


def test_in_memory_cache_returns_copies():
    cache = InMemoryCache()
    cache.set_ids("key", [1, 2], 300)

    cache.get_ids("key").append(3)

    assert cache.get_ids("key") == [1, 2]


def test_in_memory_cache_expires(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(cache_module.time, "time", lambda: now[0])
    cache = InMemoryCache()
    cache.set_ids("key", [], 300)

    now[0] = 1299.0
    assert cache.get_ids("key") == []
    now[0] = 1300.0
    assert cache.get_ids("key") is None


def test_redis_cache_serializes_json():
    client = MagicMock()
    client.get.return_value = b"[101, 103]"
    cache = RedisCache(client)

    cache.set_ids("key", [101, 103], 300)

    client.setex.assert_called_once_with("key", 300, "[101, 103]")
    assert cache.get_ids("key") == [101, 103]


def test_redis_cache_ignores_malformed_entries():
    client = MagicMock()
    cache = RedisCache(client)

    client.get.return_value = b'{"a": 1}'
    assert cache.get_ids("key") is None
    client.get.return_value = b"not json"
    assert cache.get_ids("key") is None


def test_redis_errors_degrade_to_miss():
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.setex.side_effect = redis.ConnectionError("down")
    cache = RedisCache(client)

    assert cache.get_ids("key") is None
    cache.set_ids("key", [1], 300)


def test_get_cache_falls_back_to_memory(monkeypatch, config):
    client = MagicMock()
    client.ping.side_effect = redis.ConnectionError("refused")
    monkeypatch.setattr(cache_module.redis, "Redis", lambda **kwargs: client)
    monkeypatch.setattr(cache_module, "_cache", None)

    assert isinstance(cache_module.get_cache(config), InMemoryCache)


def test_get_cache_uses_redis_when_reachable(monkeypatch, config):
    client = MagicMock()
    monkeypatch.setattr(cache_module.redis, "Redis", lambda **kwargs: client)
    monkeypatch.setattr(cache_module, "_cache", None)

    backend = cache_module.get_cache(config)

    assert isinstance(backend, RedisCache)
    assert backend.client is client


def test_in_memory_cache_sweeps_expired_entries_on_write(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(cache_module.time, "time", lambda: now[0])
    cache = InMemoryCache(sweep_interval=0)
    cache.set_ids("inv_search_a", [1], 10)
    cache.set_ids("inv_search_b", [2], 10)

    now[0] = 1011.0
    cache.set_ids("inv_search_c", [3], 10)

    assert set(cache._store) == {"inv_search_c"}
