"""
CircuitBreaker - stops dispatching to a provider after repeated failures.

State lives in the shared store as a single failure counter per provider:

    key  circuit:<provider>   value  consecutive failure count   TTL  failure window

The state is derived from that counter on every check (see state_for):

- CLOSED: count < threshold (or key absent); dispatch allowed
- OPEN:   count >= threshold; dispatch skipped

Transitions:
- CLOSED -> CLOSED: failure below the threshold (count + 1, TTL refreshed)
- CLOSED -> OPEN:   failure that brings the count to the threshold
- OPEN   -> OPEN:   failure recorded while open (TTL refreshed)
- ANY    -> CLOSED: success (key deleted)
- ANY    -> CLOSED: no failure for one window (store expires the key)

There is no half-open state: the store TTL does the cool-down, so no
background sweep is needed and a check is a single read.
"""

from enum import Enum
from typing import Dict, List, Optional

from loguru import logger

from ...clients.store import KeyValueStore, StoreUnavailable
from ...middleware.monitoring import record_circuit_opened
from ...models.internal import CircuitStatus
from ...providers.enums import Provider


CIRCUIT_PREFIX = "circuit:"


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Dispatch skipped


class CircuitEvent(str, Enum):
    FAILURE = "failure"
    SUCCESS = "success"
    WINDOW_EXPIRED = "window_expired"


def state_for(failure_count: int, threshold: int) -> CircuitState:
    """Canonical state derivation from a stored failure count."""
    return CircuitState.OPEN if failure_count >= threshold else CircuitState.CLOSED


def transition(event: CircuitEvent, failure_count: int, threshold: int) -> tuple[CircuitState, int]:
    """
    Apply one event to a failure count.

    Args:
        event: What happened
        failure_count: Count before the event (0 when the key is absent)
        threshold: Failures needed to open

    Returns:
        (state after the event, count after the event)
    """
    if event == CircuitEvent.FAILURE:
        count = failure_count + 1
        return state_for(count, threshold), count
    return CircuitState.CLOSED, 0


class CircuitBreaker:
    """
    Store-backed circuit breaker shared by every request-handling instance.

    Reads fail open: if the store is unreachable a provider is treated as
    closed, so the AI call path stays available. Writes that fail are logged
    and dropped.

    Usage:
        if not await breaker.is_open(provider):
            result = await client.generate(prompt)
            if result.success:
                await breaker.record_success(provider)
            else:
                await breaker.record_failure(provider)
    """

    def __init__(self, store: KeyValueStore, failure_threshold: int = 3, failure_window_seconds: int = 60):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if failure_window_seconds < 1:
            raise ValueError("failure_window_seconds must be at least 1")
        self.store = store
        self.failure_threshold = failure_threshold
        self.failure_window_seconds = failure_window_seconds

    @staticmethod
    def key_for(provider: Provider) -> str:
        return f"{CIRCUIT_PREFIX}{provider.value}"

    async def failure_count(self, provider: Provider) -> int:
        """
        Read the live failure count.

        Raises:
            StoreUnavailable: If the store cannot be read
        """
        value = await self.store.get(self.key_for(provider))
        if value is None:
            return 0
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.error(f"Corrupt circuit counter for {provider.value}: {value!r}")
            return 0

    async def get_state(self, provider: Provider) -> CircuitState:
        """Current state; CLOSED when the store is unavailable."""
        try:
            count = await self.failure_count(provider)
        except StoreUnavailable as e:
            logger.warning(f"Circuit check for {provider.value} failed open: {e}")
            return CircuitState.CLOSED
        return state_for(count, self.failure_threshold)

    async def is_open(self, provider: Provider) -> bool:
        """True when dispatch to provider should be skipped."""
        return await self.get_state(provider) == CircuitState.OPEN

    async def record_failure(self, provider: Provider) -> Optional[int]:
        """
        Atomically count a failure and refresh the window.

        Returns:
            The new failure count, or None if the store was unavailable
        """
        try:
            count = await self.store.increment(self.key_for(provider), self.failure_window_seconds)
        except StoreUnavailable as e:
            logger.error(f"Could not record failure for {provider.value}: {e}")
            return None

        if count == self.failure_threshold:
            logger.warning(
                f"Circuit breaker '{provider.value}' OPENED after {count} consecutive failures "
                f"(cool-down {self.failure_window_seconds}s)"
            )
            record_circuit_opened(provider.value)
        else:
            logger.info(f"Provider {provider.value} failure count: {count}")
        return count

    async def record_success(self, provider: Provider) -> None:
        """Delete the counter, closing the circuit regardless of its count."""
        try:
            await self.store.delete(self.key_for(provider))
        except StoreUnavailable as e:
            logger.error(f"Could not reset circuit for {provider.value}: {e}")
            return
        logger.debug(f"Circuit breaker '{provider.value}' reset")

    async def get_status(self, provider: Provider) -> CircuitStatus:
        try:
            count = await self.failure_count(provider)
        except StoreUnavailable:
            return CircuitStatus(
                provider=provider,
                state=CircuitState.CLOSED.value,
                store_reachable=False,
            )
        return CircuitStatus(
            provider=provider,
            state=state_for(count, self.failure_threshold).value,
            failure_count=count,
        )

    async def get_all_status(self, providers: Optional[List[Provider]] = None) -> Dict[str, CircuitStatus]:
        """Status of every provider, keyed by provider name."""
        if providers is None:
            providers = Provider.priority_order()
        return {provider.value: await self.get_status(provider) for provider in providers}
