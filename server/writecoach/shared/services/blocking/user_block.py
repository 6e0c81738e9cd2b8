"""
Temporary client blocks set when every provider failed for a request.
"""

import time

from loguru import logger

from ...clients.store import KeyValueStore, StoreUnavailable
from ...middleware.monitoring import record_user_block


USER_BLOCK_PREFIX = "userblock:"


class UserBlockService:
    """
    Binary, self-expiring block flag per client identity.
    The key existing means blocked; the store TTL ends the block.
    """

    def __init__(self, store: KeyValueStore, block_ttl_seconds: int = 60):
        self.store = store
        self.block_ttl_seconds = block_ttl_seconds

    @staticmethod
    def key_for(client_identity: str) -> str:
        return f"{USER_BLOCK_PREFIX}{client_identity}"

    async def block(self, client_identity: str) -> bool:
        """
        Block a client for block_ttl_seconds.

        Returns:
            True if the block was written
        """
        try:
            await self.store.set(self.key_for(client_identity), str(int(time.time() * 1000)), self.block_ttl_seconds)
        except StoreUnavailable as e:
            logger.error(f"Could not block client {client_identity}: {e}")
            return False
        record_user_block()
        logger.warning(f"Blocked client {client_identity} for {self.block_ttl_seconds}s")
        return True

    async def is_blocked(self, client_identity: str) -> bool:
        """Check the block flag; an unreachable store means not blocked."""
        try:
            return await self.store.exists(self.key_for(client_identity))
        except StoreUnavailable as e:
            logger.warning(f"Block check for {client_identity} failed open: {e}")
            return False

    async def unblock(self, client_identity: str) -> None:
        try:
            await self.store.delete(self.key_for(client_identity))
        except StoreUnavailable as e:
            logger.error(f"Could not unblock client {client_identity}: {e}")
