"""Listing response cache backed by Redis.

Only an out-of-process store is used; when Redis is disabled or unreachable
the no-op cache takes over and every request hits the database.
"""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import redis

from .config import Settings

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):
    name: str

    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None: ...


@dataclass
class RedisCache:
    client: redis.Redis
    name: str = "redis"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            data = self.client.get(key)
        except redis.RedisError as exc:  # pragma: no cover - protective
            logger.warning("Redis get failed: %s", exc)
            return None
        if not data:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            return None

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        if ttl <= 0:
            return
        try:
            self.client.setex(key, ttl, json.dumps(value, default=str))
        except redis.RedisError as exc:  # pragma: no cover - protective
            logger.warning("Redis set failed: %s", exc)


class NullCache:
    name = "disabled"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return None

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        return None


def cache_key(prefix: str, payload: Dict[str, Any]) -> str:
    encoded = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    return f"{prefix}:{hashlib.sha1(encoded).hexdigest()}"


def create_cache(settings: Settings) -> CacheBackend:
    if not settings.cache_enabled:
        return NullCache()
    try:
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
            decode_responses=False,
        )
        client.ping()
        logger.info("Using Redis cache at %s:%s", settings.redis_host, settings.redis_port)
        return RedisCache(client)
    except redis.RedisError:
        logger.warning("Redis not available, listing cache disabled")
        return NullCache()
