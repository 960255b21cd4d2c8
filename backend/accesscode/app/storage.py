"""Key-value stores backing the issuance guard."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .errors import StorageUnavailable


LOGGER = logging.getLogger("accesscode.storage")


class CacheBackend:
    """Minimal async cache interface used by the guard."""

    async def get(self, key: str) -> Optional[bytes]:  # pragma: no cover - interface
        raise NotImplementedError

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def set_if_absent(self, key: str, value: bytes, ttl: Optional[int] = None) -> bool:  # pragma: no cover - interface
        """Store ``value`` only when ``key`` is unset; return whether it was stored."""
        raise NotImplementedError

    async def delete(self, key: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class MemoryCache(CacheBackend):
    """In-process cache used when Redis isn't configured.

    ``clock`` returns seconds on any monotonic scale; it defaults to the
    running loop's clock.
    """

    def __init__(self, *, clock: Callable[[], float] | None = None) -> None:
        self._store: dict[str, tuple[bytes, Optional[float]]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    def _now(self) -> float:
        if self._clock is not None:
            return self._clock()
        return asyncio.get_running_loop().time()

    def _live_entry(self, key: str) -> Optional[bytes]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._now():
            self._store.pop(key, None)
            return None
        return value

    def _put(self, key: str, value: bytes, ttl: Optional[int]) -> None:
        expires_at = None
        if ttl:
            expires_at = self._now() + ttl
        self._store[key] = (value, expires_at)

    async def get(self, key: str) -> Optional[bytes]:
        async with self._lock:
            return self._live_entry(key)

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        async with self._lock:
            self._put(key, value, ttl)

    async def set_if_absent(self, key: str, value: bytes, ttl: Optional[int] = None) -> bool:
        async with self._lock:
            if self._live_entry(key) is not None:
                return False
            self._put(key, value, ttl)
            return True

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._store.pop(key, None)


class RedisCache(CacheBackend):
    """Redis backed cache using ``redis.asyncio``."""

    def __init__(self, url: str | None = None, *, client: "redis.Redis | None" = None) -> None:
        if client is None:
            if not url:
                raise ValueError("RedisCache needs a url or a client")
            client = redis.from_url(url)
        self._client = client

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await self._client.get(key)
        except RedisError as exc:
            raise StorageUnavailable("redis get failed") from exc

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        try:
            await self._client.set(name=key, value=value, ex=ttl)
        except RedisError as exc:
            raise StorageUnavailable("redis set failed") from exc

    async def set_if_absent(self, key: str, value: bytes, ttl: Optional[int] = None) -> bool:
        try:
            stored = await self._client.set(name=key, value=value, ex=ttl, nx=True)
        except RedisError as exc:
            raise StorageUnavailable("redis set failed") from exc
        return bool(stored)

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as exc:
            raise StorageUnavailable("redis delete failed") from exc


def build_cache(redis_url: str | None) -> CacheBackend:
    if redis_url:
        try:
            return RedisCache(redis_url)
        except (RedisError, ValueError):
            LOGGER.warning("redis cache initialisation failed", exc_info=True)
    return MemoryCache()


__all__ = [
    "CacheBackend",
    "MemoryCache",
    "RedisCache",
    "build_cache",
]
