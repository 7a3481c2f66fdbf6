"""Listing cache construction."""

import redis

from storefront import cache as cache_module
from storefront.config import Settings


class FakeRedis:
    def __init__(self, **kwargs):
        self.kwargs = kwargs

    def ping(self):
        return True


class DownRedis(FakeRedis):
    def ping(self):
        raise redis.ConnectionError("connection refused")


def test_create_cache_bounds_redis_socket_waits(monkeypatch):
    monkeypatch.setattr(cache_module.redis, "Redis", FakeRedis)
    backend = cache_module.create_cache(Settings(cache_enabled=True, redis_socket_timeout=0.25))

    assert backend.name == "redis"
    assert backend.client.kwargs["socket_timeout"] == 0.25
    assert backend.client.kwargs["socket_connect_timeout"] == 0.25


def test_create_cache_falls_back_when_redis_is_down(monkeypatch):
    monkeypatch.setattr(cache_module.redis, "Redis", DownRedis)
    backend = cache_module.create_cache(Settings(cache_enabled=True))
    assert backend.name == "disabled"


def test_create_cache_disabled():
    assert cache_module.create_cache(Settings(cache_enabled=False)).name == "disabled"
