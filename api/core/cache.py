"""
Key/value cache backend: get, set-with-ttl, delete.

Two backends share the same async surface:
- `MemoryCache`: in-process, bounded entry count with LRU eviction, per-entry TTL.
- `RedisCache`: `redis.asyncio` client, JSON values, TTL via `SET ... EX`.
  Eviction is the Redis server's own `maxmemory-policy`.

The backend is chosen once on startup (see `init_cache`): Redis when
`REDIS_URL` is set, memory otherwise.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from redis.asyncio import Redis

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_TTL_S = 300


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def redis_url() -> str:
    return os.environ.get("REDIS_URL", "").strip()


def max_entries() -> int:
    value = _env_int("CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES)
    return value if value > 0 else DEFAULT_MAX_ENTRIES


class CacheBackend(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_s: int | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...


@dataclass
class _Entry:
    value: Any
    expires_at: float | None


class MemoryCache:
    """
    Bounded LRU cache with per-entry expiry.

    Values are deep-copied on the way in and out so a cached entry can only
    change through `set`/`delete`.
    """

    def __init__(
        self,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        default_ttl_s: int | None = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive.")
        self.max_entries = max_entries
        self.default_ttl_s = default_ttl_s
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._expired(entry)

    def _expired(self, entry: _Entry) -> bool:
        return entry.expires_at is not None and self._clock() >= entry.expires_at

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return copy.deepcopy(entry.value)

    async def set(self, key: str, value: Any, ttl_s: int | None = None) -> None:
        ttl = ttl_s if ttl_s is not None else self.default_ttl_s
        expires_at = self._clock() + ttl if ttl and ttl > 0 else None
        self._entries[key] = _Entry(value=copy.deepcopy(value), expires_at=expires_at)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("cache_evicted key=%s", evicted)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def close(self) -> None:
        self._entries.clear()


class RedisCache:
    def __init__(self, client: Redis, *, default_ttl_s: int | None = DEFAULT_TTL_S) -> None:
        self._client = client
        self.default_ttl_s = default_ttl_s

    @classmethod
    def from_url(cls, url: str, *, default_ttl_s: int | None = DEFAULT_TTL_S) -> "RedisCache":
        client = Redis.from_url(url, decode_responses=True, health_check_interval=30)
        return cls(client, default_ttl_s=default_ttl_s)

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_s: int | None = None) -> None:
        ttl = ttl_s if ttl_s is not None else self.default_ttl_s
        payload = json.dumps(value, ensure_ascii=True, default=str)
        if ttl and ttl > 0:
            await self._client.set(key, payload, ex=ttl)
        else:
            await self._client.set(key, payload)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def close(self) -> None:
        await self._client.aclose()


_cache: CacheBackend | None = None


async def init_cache(backend: CacheBackend | None = None) -> CacheBackend:
    global _cache
    if _cache is not None:
        return _cache
    if backend is not None:
        _cache = backend
    elif redis_url():
        _cache = RedisCache.from_url(redis_url())
        logger.info("cache_backend backend=redis")
    else:
        _cache = MemoryCache(max_entries=max_entries())
        logger.info("cache_backend backend=memory max_entries=%s", max_entries())
    return _cache


async def close_cache() -> None:
    global _cache
    if _cache is None:
        return None
    await _cache.close()
    _cache = None


def cache() -> CacheBackend:
    if _cache is None:
        raise RuntimeError("Cache is not initialized. Call init_cache() on startup.")
    return _cache
