"""
Dependency injection for FastAPI without global state.
"""
from typing import Annotated, List, Optional
from fastapi import Depends, Request
from functools import lru_cache

from .config import Settings
from .connection_manager import ConnectionManager
from .initializer import Initializer
from ..clients import KeyValueStore
from ..providers.base import BaseProvider
from ..services.blocking import UserBlockService
from ..services.cache import ResponseCache
from ..services.circuit import CircuitBreaker
from ..services.coach import WritingCoachService
from ..services.dispatch import FailoverDispatcher
from ..services.rate_limit import ClientRateLimiter
from ..services.visitors import VisitorCounter
from ..utils.hashing import derive_client_identity


# Configuration (cached at module level for efficiency)
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Shared resources (from app.state)
async def get_connection_manager(request: Request) -> ConnectionManager:
    """
    Get connection manager from app state.
    The ConnectionManager holds all shared expensive resources.
    """
    if not hasattr(request.app.state, 'connection_manager'):
        raise RuntimeError("ConnectionManager not found in app.state. Is the app properly initialized?")
    return request.app.state.connection_manager


async def get_initializer(request: Request) -> Initializer:
    """Get the catalogue loader created at startup."""
    if not hasattr(request.app.state, 'initializer'):
        raise RuntimeError("Initializer not found in app.state. Is the app properly initialized?")
    return request.app.state.initializer


async def get_provider_chain(request: Request) -> List[BaseProvider]:
    """Provider clients built once at startup, in priority order."""
    return getattr(request.app.state, 'provider_chain', [])


async def get_rate_limiter(request: Request) -> Optional[ClientRateLimiter]:
    """Shared rate limiter, or None when rate limiting is disabled."""
    return getattr(request.app.state, 'rate_limiter', None)


async def get_store(
    conn_manager: Annotated[ConnectionManager, Depends(get_connection_manager)]
) -> KeyValueStore:
    """
    Get the key-value store.
    Each request gets its own adapter, but they all share the same connection pool.
    """
    return conn_manager.get_store()


# Service Dependencies (created per request, lightweight)
async def get_circuit_breaker(
    store: Annotated[KeyValueStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> CircuitBreaker:
    return CircuitBreaker(
        store,
        failure_threshold=settings.failure_threshold,
        failure_window_seconds=settings.failure_window_seconds,
    )


async def get_user_block_service(
    store: Annotated[KeyValueStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> UserBlockService:
    return UserBlockService(store, block_ttl_seconds=settings.user_block_ttl_seconds)


async def get_response_cache(
    store: Annotated[KeyValueStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> ResponseCache:
    """Create cache service per request with the shared store."""
    return ResponseCache(store, ttl=settings.cache_ttl_seconds)


async def get_dispatcher(
    providers: Annotated[List[BaseProvider], Depends(get_provider_chain)],
    circuit_breaker: Annotated[CircuitBreaker, Depends(get_circuit_breaker)],
    user_blocks: Annotated[UserBlockService, Depends(get_user_block_service)]
) -> FailoverDispatcher:
    """
    Create FailoverDispatcher per request.
    THE component that sends prompts to providers.
    """
    return FailoverDispatcher(providers, circuit_breaker, user_blocks)


async def get_coach_service(
    dispatcher: Annotated[FailoverDispatcher, Depends(get_dispatcher)],
    cache: Annotated[ResponseCache, Depends(get_response_cache)],
    initializer: Annotated[Initializer, Depends(get_initializer)],
    rate_limiter: Annotated[Optional[ClientRateLimiter], Depends(get_rate_limiter)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> WritingCoachService:
    return WritingCoachService(
        dispatcher,
        cache,
        initializer.certificates,
        rate_limiter=rate_limiter,
        max_submission_length=settings.max_submission_length,
        block_retry_after=settings.user_block_ttl_seconds,
    )


async def get_visitor_counter(
    store: Annotated[KeyValueStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> VisitorCounter:
    return VisitorCounter(store, fingerprint_ttl_seconds=settings.visitor_fingerprint_ttl_seconds)


async def get_client_identity(request: Request) -> str:
    """Caller identity used for user blocks and rate limits."""
    peer_host = request.client.host if request.client else None
    return derive_client_identity(request.headers.get("x-forwarded-for"), peer_host, request.headers)


# Type aliases for cleaner code in route handlers
StoreDep = Annotated[KeyValueStore, Depends(get_store)]
CircuitBreakerDep = Annotated[CircuitBreaker, Depends(get_circuit_breaker)]
InitializerDep = Annotated[Initializer, Depends(get_initializer)]
ProviderChainDep = Annotated[List[BaseProvider], Depends(get_provider_chain)]
CoachServiceDep = Annotated[WritingCoachService, Depends(get_coach_service)]
VisitorCounterDep = Annotated[VisitorCounter, Depends(get_visitor_counter)]
ClientIdentity = Annotated[str, Depends(get_client_identity)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
