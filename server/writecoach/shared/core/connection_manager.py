"""
Connection management.
"""
from typing import Optional

import httpx
import redis.asyncio as redis
from redis.exceptions import RedisError
from loguru import logger

from .config import Settings
from ..clients.store import KeyValueStore, MemoryStore, RedisStore


class ConnectionManager:
    """
    Owns the two shared resources of the process: the key-value store and
    the HTTP client used by every provider.
    Created once in the app lifespan and kept on app.state.

    - redis backend: one ConnectionPool; each get_store() call wraps it
    - memory backend: one MemoryStore for the whole process
    - provider calls share one httpx.AsyncClient (HTTP/2, pooled)
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.redis_pool: Optional[redis.ConnectionPool] = None
        self.memory_store: Optional[MemoryStore] = None
        self.http_client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the store and HTTP client. Safe to call once per process."""
        if self.is_initialized():
            logger.warning("ConnectionManager already initialized, skipping")
            return

        if self.settings.uses_memory_store():
            self.memory_store = MemoryStore()
            logger.warning("Store backend is 'memory': run a single instance only")
        else:
            self.redis_pool = redis.ConnectionPool.from_url(
                self.settings.redis_url,
                max_connections=self.settings.redis_max_connections,
                decode_responses=True,
                socket_keepalive=True,
                socket_timeout=self.settings.redis_socket_timeout,
                socket_connect_timeout=self.settings.redis_socket_timeout,
                health_check_interval=self.settings.redis_health_check_interval,
            )
            if await self.get_store().ping():
                logger.info(f"Redis store reachable (pool size {self.settings.redis_max_connections})")
            else:
                logger.error("Redis is unreachable at startup; circuits and blocks will fail open")

        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.provider_timeout),
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=50),
            http2=True,
        )
        logger.info(f"Provider HTTP client ready (timeout {self.settings.provider_timeout}s)")

    def get_store(self) -> KeyValueStore:
        """The shared store; RedisStore instances are thin wrappers over one pool."""
        if self.memory_store is not None:
            return self.memory_store
        if self.redis_pool is None:
            raise RuntimeError("ConnectionManager not initialized. Call initialize() first.")
        return RedisStore(redis.Redis(connection_pool=self.redis_pool))

    async def get_http_client(self) -> httpx.AsyncClient:
        if self.http_client is None:
            raise RuntimeError("ConnectionManager not initialized. Call initialize() first.")
        return self.http_client

    async def close(self) -> None:
        """Release the store and HTTP client."""
        if self.redis_pool is not None:
            try:
                await self.redis_pool.disconnect()
            except (RedisError, OSError) as e:
                logger.error(f"Error closing Redis pool: {e}")
            self.redis_pool = None

        if self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None

        if self.memory_store is not None:
            await self.memory_store.close()
            self.memory_store = None

        logger.info("Store and HTTP client closed")

    def is_initialized(self) -> bool:
        return self.http_client is not None

