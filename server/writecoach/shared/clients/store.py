"""
Key-value store adapters - the only shared mutable state of the service.

Circuit-breaker counters, cached AI responses and user blocks all live here.
Two strategies are available and are never mixed:

- RedisStore: distributed, safe across any number of worker processes.
- MemoryStore: process-local, for a SINGLE-INSTANCE deployment (and tests) only.
"""

import math
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError
from loguru import logger


class StoreUnavailable(Exception):
    """Raised when the backing store cannot be reached or times out."""

    def __init__(self, operation: str, key: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.key = key
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Store {operation} failed for key {key}{detail}")


class KeyValueStore(ABC):
    """
    Async key-value contract used by the orchestration layer.

    Every operation either completes or raises StoreUnavailable; callers decide
    whether to fail open or fail closed.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int) -> None:
        """Store value under key with a TTL in seconds."""

    @abstractmethod
    async def increment(self, key: str, ttl: Optional[int] = None) -> int:
        """Atomically increment key (creating it at 1) and refresh its TTL; no TTL keeps it forever."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key; deleting an absent key is not an error."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether key is present and not expired."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check store reachability."""

    async def close(self) -> None:
        """Release resources held by the adapter."""


class RedisStore(KeyValueStore):
    """
    Redis-backed store.
    Wraps a redis.asyncio client that shares the application connection pool.
    """

    def __init__(self, redis_instance: redis.Redis):
        self.redis = redis_instance

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self.redis.get(key)
        except (RedisError, OSError) as e:
            raise StoreUnavailable("get", key, e) from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self.redis.set(key, value, ex=ttl)
        except (RedisError, OSError) as e:
            raise StoreUnavailable("set", key, e) from e

    async def increment(self, key: str, ttl: Optional[int] = None) -> int:
        """
        INCR + EXPIRE inside one MULTI/EXEC transaction.
        Concurrent increments from other instances are never lost.
        """
        try:
            if ttl is None:
                return int(await self.redis.incr(key))
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, ttl)
                count, _ = await pipe.execute()
        except (RedisError, OSError) as e:
            raise StoreUnavailable("increment", key, e) from e
        return int(count)

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except (RedisError, OSError) as e:
            raise StoreUnavailable("delete", key, e) from e

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.redis.exists(key))
        except (RedisError, OSError) as e:
            raise StoreUnavailable("exists", key, e) from e

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except (RedisError, OSError) as e:
            logger.error(f"Redis ping failed: {e}")
            return False


class MemoryStore(KeyValueStore):
    """
    Process-local store with lazy TTL expiry.

    SINGLE-INSTANCE ONLY: state is invisible to other worker processes, so
    circuit counters and user blocks are per-process with this strategy.
    The clock is injectable so TTL behaviour can be driven by a fake clock.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.monotonic
        self._data: Dict[str, Tuple[str, float]] = {}
        logger.warning("MemoryStore in use - state is local to this process")

    def _live_value(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        return self._live_value(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._data[key] = (str(value), self._clock() + ttl)

    async def increment(self, key: str, ttl: Optional[int] = None) -> int:
        # No await between read and write: atomic on the event loop.
        current = self._live_value(key)
        count = int(current) + 1 if current is not None else 1
        if ttl is not None:
            expires_at = self._clock() + ttl
        elif current is not None:
            expires_at = self._data[key][1]  # INCR keeps an existing TTL
        else:
            expires_at = math.inf
        self._data[key] = (str(count), expires_at)
        return count

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        return self._live_value(key) is not None

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()
