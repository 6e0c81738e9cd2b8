"""
Visitor counter - distinct visitors seen in the last fingerprint TTL.

    stats:total_users     running total, never expires
    user:fp:<fingerprint> last visit (ms), TTL refreshed on every visit
"""

import time
from typing import Optional, Tuple

from loguru import logger

from ...clients.store import KeyValueStore, StoreUnavailable
from ...core.exceptions import ServiceUnavailableError


TOTAL_USERS_KEY = "stats:total_users"
FINGERPRINT_PREFIX = "user:fp:"
FINGERPRINT_TTL_SECONDS = 60 * 60 * 24 * 30


class VisitorCounter:
    """
    Counts a browser fingerprint once per TTL window.
    Reads of the total fail open to 0; registrations need the store.
    """

    def __init__(self, store: KeyValueStore, fingerprint_ttl_seconds: int = FINGERPRINT_TTL_SECONDS):
        self.store = store
        self.fingerprint_ttl_seconds = fingerprint_ttl_seconds

    @staticmethod
    def key_for(fingerprint: str) -> str:
        return f"{FINGERPRINT_PREFIX}{fingerprint}"

    @staticmethod
    def _as_count(value: Optional[str]) -> int:
        try:
            return int(value) if value is not None else 0
        except ValueError:
            logger.error(f"Corrupt visitor total: {value!r}")
            return 0

    async def total_users(self) -> int:
        try:
            return self._as_count(await self.store.get(TOTAL_USERS_KEY))
        except StoreUnavailable as e:
            logger.warning(f"Visitor total unavailable, reporting 0: {e}")
            return 0

    async def register(self, fingerprint: str) -> Tuple[bool, int]:
        """
        Record a visit.

        Args:
            fingerprint: Sanitized fingerprint (alphanumeric, 10-64 characters)

        Returns:
            (is_new_user, total_users)

        Raises:
            ServiceUnavailableError: If the store cannot be reached
        """
        key = self.key_for(fingerprint)
        now_ms = str(int(time.time() * 1000))
        try:
            if await self.store.get(key) is None:
                total = await self.store.increment(TOTAL_USERS_KEY)
                await self.store.set(key, now_ms, self.fingerprint_ttl_seconds)
                logger.info(f"New visitor {fingerprint[:8]}..., total {total}")
                return True, total

            await self.store.set(key, now_ms, self.fingerprint_ttl_seconds)
            return False, self._as_count(await self.store.get(TOTAL_USERS_KEY))
        except StoreUnavailable as e:
            logger.error(f"Could not register visitor {fingerprint[:8]}...: {e}")
            raise ServiceUnavailableError("visitor counter") from e
