"""
Per-client request rate limiting.

Two moving windows gate every AI request: a short burst window checked first,
then the main window. Counters live in the configured `limits` storage
(Redis in production) so every instance sees the same counts.
"""

import math
import time
from dataclasses import dataclass
from typing import Optional

from limits import RateLimitItem, parse
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string
from loguru import logger


MIN_BURST_RETRY_AFTER = 5


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset: float = 0.0
    reason: Optional[str] = None
    retry_after: Optional[int] = None


class ClientRateLimiter:
    """
    Burst + main window limiter keyed by client identity.

    Limiter failures (storage unreachable) allow the request.
    """

    def __init__(self, storage_uri: str = "async+memory://", main_limit: str = "10/minute", burst_limit: str = "3/10 seconds"):
        self.storage = storage_from_string(storage_uri)
        self.limiter = MovingWindowRateLimiter(self.storage)
        self.main_limit: RateLimitItem = parse(main_limit)
        self.burst_limit: RateLimitItem = parse(burst_limit)
        self.main_limit_text = main_limit
        logger.info(f"Rate limiter configured: burst={burst_limit}, main={main_limit}")

    async def _hit(self, item: RateLimitItem, namespace: str, client_identity: str) -> tuple[bool, int, float]:
        allowed = await self.limiter.hit(item, namespace, client_identity)
        stats = await self.limiter.get_window_stats(item, namespace, client_identity)
        return allowed, stats.remaining, stats.reset_time

    async def check(self, client_identity: str) -> RateLimitResult:
        """Record one request for client_identity and decide whether it may proceed."""
        try:
            allowed, _, reset = await self._hit(self.burst_limit, "burst", client_identity)
            if not allowed:
                retry_after = max(math.ceil(reset - time.time()), MIN_BURST_RETRY_AFTER)
                logger.warning(f"Burst limit exceeded for {client_identity}. Reset in {retry_after}s")
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset=reset,
                    reason="Too many requests in a short time. Please wait a few seconds.",
                    retry_after=retry_after,
                )

            allowed, remaining, reset = await self._hit(self.main_limit, "main", client_identity)
            if not allowed:
                retry_after = max(math.ceil(reset - time.time()), 1)
                logger.warning(f"Rate limit exceeded for {client_identity}. Reset in {retry_after}s")
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset=reset,
                    reason=f"Rate limit of {self.main_limit_text} exceeded. Please wait.",
                    retry_after=retry_after,
                )
        except Exception as e:
            logger.error(f"Rate limit check failed for {client_identity}, allowing request: {e}")
            return RateLimitResult(allowed=True, remaining=-1)

        logger.debug(f"Rate limit OK for {client_identity}: {remaining} remaining")
        return RateLimitResult(allowed=True, remaining=remaining, reset=reset)

    async def reset(self) -> None:
        await self.storage.reset()
