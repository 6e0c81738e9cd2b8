"""
Content-addressed cache for validated AI responses.
"""
import json
from typing import Any, Dict, Optional

from loguru import logger

from ...clients.store import KeyValueStore, StoreUnavailable
from ...middleware.monitoring import record_cache_result
from ...utils.hashing import request_fingerprint


class ResponseCache:
    """
    Cache of parsed, schema-valid responses keyed by request fingerprint.

    Only structured payloads are stored (never raw provider text), so a hit
    needs no re-parsing. Entries expire by TTL; there is no invalidation path.
    Concurrent duplicate writes for one fingerprint are harmless: same key,
    same payload.
    """

    def __init__(self, store: KeyValueStore, ttl: int = 86400, namespace: str = "essay"):
        """
        Initialize response cache.

        Args:
            store: Shared key-value store
            ttl: Entry lifetime in seconds (1 day)
            namespace: Key prefix
        """
        self.backend = store
        self.ttl = ttl
        self.namespace = namespace

    @staticmethod
    def fingerprint(user_text: str, reference_text: str, target_profile: str) -> str:
        return request_fingerprint(user_text, reference_text, target_profile)

    def _full_key(self, fingerprint: str) -> str:
        return f"{self.namespace}:{fingerprint}"

    async def lookup(self, fingerprint: str) -> Optional[Dict[str, Any]]:
        """
        Get a cached payload.

        Returns:
            The payload, or None on miss. Store failures and undecodable
            entries are treated as misses.
        """
        full_key = self._full_key(fingerprint)
        try:
            cached = await self.backend.get(full_key)
        except StoreUnavailable as e:
            record_cache_result("error")
            logger.warning(f"Cache read failed for {full_key}, treating as miss: {e}")
            return None

        if cached is None:
            record_cache_result("miss")
            logger.debug(f"Cache miss: {fingerprint[:8]}")
            return None

        try:
            payload = json.loads(cached)
        except (TypeError, ValueError) as e:
            record_cache_result("error")
            logger.warning(f"Discarding undecodable cache entry {full_key}: {e}")
            return None

        record_cache_result("hit")
        logger.info(f"Cache hit: {fingerprint[:8]}")
        return payload

    async def store(self, fingerprint: str, payload: Dict[str, Any]) -> bool:
        """
        Cache a validated payload.

        Returns:
            True if written, False if the store was unavailable
        """
        full_key = self._full_key(fingerprint)
        try:
            await self.backend.set(full_key, json.dumps(payload, ensure_ascii=False), self.ttl)
        except StoreUnavailable as e:
            record_cache_result("error")
            logger.warning(f"Cache write failed for {full_key}: {e}")
            return False

        record_cache_result("store")
        logger.debug(f"Cached {fingerprint[:8]} for {self.ttl}s")
        return True
