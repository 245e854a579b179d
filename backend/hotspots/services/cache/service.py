"""Key/value stores for cached places data.

- CacheService: the interface the places cache and routes depend on
- RedisCacheService: shared Redis store, values kept as JSON strings
- InMemoryCacheService: process-local LRU store with optional TTL, used when
  no Redis URL is configured and in tests

Backends report failures as ``CacheBackendError`` so callers can degrade to
a direct fetch without knowing which store is in use.
"""

import json
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Awaitable, Callable, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from hotspots.models import CacheBackendError

T = TypeVar("T")


class CacheService(ABC):
    """Store of JSON-serializable values by string key."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Value stored under ``key``, or None when absent or expired.

        Raises:
            CacheBackendError: If the backend cannot be read.
        """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Args:
            key: Cache key.
            value: JSON-serializable value.
            ttl_seconds: Expiry in seconds. None keeps the value until it is
                overwritten or evicted.

        Raises:
            CacheBackendError: If the backend cannot be written.
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns False if nothing was stored."""

    async def close(self) -> None:
        return None

    @staticmethod
    def build_details_key(place_id: str) -> str:
        """Key for a Place Details response.

        Example:
            >>> CacheService.build_details_key("ChIJmQJIxlVYwokRLgeuocVOGVU")
            'place_details:ChIJmQJIxlVYwokRLgeuocVOGVU'
        """
        return f"place_details:{place_id}"


class RedisCacheService(CacheService):
    """Redis store reached through ``redis.asyncio``.

    The client (and its connection pool) is created on first use and
    released by ``close``.
    """

    def __init__(self, redis_url: str = "redis://localhost:6379") -> None:
        self._url = redis_url
        self._client: redis.Redis | None = None

    def _redis(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self._url, encoding="utf-8", decode_responses=True)
        return self._client

    async def close(self) -> None:
        if self._client is None:
            return
        client, self._client = self._client, None
        await client.aclose()

    async def _run(self, op: str, key: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except (RedisError, OSError) as e:
            raise CacheBackendError(f"Redis {op} {key} failed: {e}") from e

    async def get(self, key: str) -> Any | None:
        raw = await self._run("GET", key, lambda: self._redis().get(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        payload = json.dumps(value)
        await self._run("SET", key, lambda: self._redis().set(key, payload, ex=ttl_seconds))

    async def exists(self, key: str) -> bool:
        count = await self._run("EXISTS", key, lambda: self._redis().exists(key))
        return count > 0

    async def delete(self, key: str) -> bool:
        removed = await self._run("DEL", key, lambda: self._redis().delete(key))
        return removed > 0


class InMemoryCacheService(CacheService):
    """Process-local LRU store with optional per-entry expiry.

    Holds at most ``max_size`` entries; the least recently read or written
    one is evicted beyond that. Values are copied in and out through JSON.
    """

    def __init__(self, max_size: int = 1000) -> None:
        self._entries: OrderedDict[str, tuple[float | None, str]] = OrderedDict()
        self._max_size = max_size

    def _lookup(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at is not None and time.time() >= expires_at:
            del self._entries[key]
            return None
        return payload

    async def get(self, key: str) -> Any | None:
        payload = self._lookup(key)
        if payload is None:
            return None
        self._entries.move_to_end(key)
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        expires_at = None if ttl_seconds is None else time.time() + ttl_seconds
        self._entries[key] = (expires_at, json.dumps(value))
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_size:
            self._entries.popitem(last=False)

    async def exists(self, key: str) -> bool:
        return self._lookup(key) is not None

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._entries)
