"""
Failover Dispatcher - the ONLY component that sends prompts to providers.
Walks the provider chain in priority order behind the circuit breaker.
"""

import time
from typing import List, Sequence

from loguru import logger

from ...middleware.monitoring import record_llm_request
from ...models.internal import AttemptOutcome, DispatchFailure, DispatchResult, ProviderAttempt
from ...providers.base import BaseProvider
from ...providers.enums import Provider
from ...utils.security import sanitize_prompt_for_logging
from ..blocking.user_block import UserBlockService
from ..circuit.circuit_breaker import CircuitBreaker


class FailoverDispatcher:
    """
    Dispatches one prompt across the provider chain.

    - Providers are tried strictly in priority order (PRIMARY, SECONDARY, TERTIARY)
    - A provider whose circuit is open is skipped without a network call
    - Each provider gets exactly one attempt per dispatch; inside that attempt
      the client walks its own keys and models
    - Success resets that provider's circuit; failure increments it
    - When nothing succeeds the client is blocked for the block TTL

    There is no backoff inside a dispatch: cross-request circuit opening is the
    backoff. Cancellation propagates; bookkeeping already written is kept.
    """

    def __init__(
        self,
        providers: Sequence[BaseProvider],
        circuit_breaker: CircuitBreaker,
        user_blocks: UserBlockService,
    ):
        """
        Initialize the dispatcher.

        Args:
            providers: Provider clients; reordered by priority, at most one per identity
            circuit_breaker: Store-backed breaker shared across instances
            user_blocks: Block flag service used on exhaustion
        """
        order = {provider: index for index, provider in enumerate(Provider.priority_order())}
        self.providers: List[BaseProvider] = sorted(providers, key=lambda client: order[client.identity])
        identities = [client.identity for client in self.providers]
        if len(set(identities)) != len(identities):
            raise ValueError(f"Duplicate provider identities in chain: {[p.value for p in identities]}")
        self.circuit_breaker = circuit_breaker
        self.user_blocks = user_blocks

    async def is_user_blocked(self, client_identity: str) -> bool:
        return await self.user_blocks.is_blocked(client_identity)

    async def dispatch(self, prompt: str, client_identity: str) -> DispatchResult:
        """
        Obtain generated text for prompt.

        Args:
            prompt: Fully composed prompt
            client_identity: Caller identity, blocked on total exhaustion

        Returns:
            DispatchResult with the text and serving provider, or a terminal
            failure (all_providers_failed / all_circuits_open / no_providers)
        """
        attempts: List[ProviderAttempt] = []
        last_error = ""
        logger.info(
            f"Dispatch for {client_identity} across {[c.get_provider() for c in self.providers]}: "
            f"{sanitize_prompt_for_logging(prompt)}"
        )

        for client in self.providers:
            provider = client.identity

            if await self.circuit_breaker.is_open(provider):
                logger.info(f"Skipping {provider.value} for {client_identity} (circuit open)")
                attempts.append(ProviderAttempt(provider=provider, outcome=AttemptOutcome.SKIPPED_CIRCUIT_OPEN))
                continue

            started = time.monotonic()
            result = await client.generate(prompt)
            duration = time.monotonic() - started
            record_llm_request(provider.value, result.model, duration, result.success)

            if result.success:
                await self.circuit_breaker.record_success(provider)
                attempts.append(ProviderAttempt(
                    provider=provider,
                    outcome=AttemptOutcome.SUCCEEDED,
                    model=result.model,
                    duration=duration,
                ))
                logger.info(
                    f"Dispatch for {client_identity} served by {provider.value}/{result.model} "
                    f"in {duration:.2f}s after {len(attempts) - 1} fallback step(s)"
                )
                return DispatchResult(
                    success=True,
                    text=result.text,
                    provider_used=provider,
                    model_used=result.model,
                    attempts=attempts,
                )

            failure_count = await self.circuit_breaker.record_failure(provider)
            last_error = result.error_message or f"{provider.value} failed"
            attempts.append(ProviderAttempt(
                provider=provider,
                outcome=AttemptOutcome.FAILED,
                error=last_error,
                failure_count=failure_count,
                duration=duration,
            ))
            logger.warning(
                f"Provider {provider.value} failed for {client_identity} "
                f"(failure count {failure_count}): {last_error}"
            )

        return await self._exhausted(client_identity, attempts, last_error)

    async def _exhausted(self, client_identity: str, attempts: List[ProviderAttempt], last_error: str) -> DispatchResult:
        """Terminal failure: block the client and classify why."""
        if not attempts:
            failure = DispatchFailure.NO_PROVIDERS
            error = "No AI providers are configured"
        elif all(attempt.outcome == AttemptOutcome.SKIPPED_CIRCUIT_OPEN for attempt in attempts):
            failure = DispatchFailure.ALL_CIRCUITS_OPEN
            error = "All AI providers are temporarily unavailable (circuits open)"
        else:
            failure = DispatchFailure.ALL_PROVIDERS_FAILED
            error = f"All AI providers failed ({last_error})"

        await self.user_blocks.block(client_identity)
        logger.error(
            f"Dispatch exhausted for {client_identity}: {failure.value}; sequence="
            + ", ".join(f"{a.provider.value}:{a.outcome.value}" for a in attempts)
        )
        return DispatchResult(success=False, error=error, failure=failure, attempts=attempts)
