"""
Health check API endpoint.
"""

import time
from fastapi import APIRouter

from ..core.dependencies import CircuitBreakerDep, ProviderChainDep, SettingsDep, StoreDep
from ..models.responses import HealthResponse


router = APIRouter(
    tags=["health"]
)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: StoreDep,
    circuit_breaker: CircuitBreakerDep,
    providers: ProviderChainDep,
    settings: SettingsDep
):
    """Store reachability plus per-provider circuit status."""
    store_reachable = await store.ping()
    circuits = await circuit_breaker.get_all_status([client.identity for client in providers])

    return HealthResponse(
        status="healthy" if store_reachable else "degraded",
        version=settings.version,
        store_backend=settings.store_backend,
        store_reachable=store_reachable,
        circuits=list(circuits.values()),
        providers={client.get_provider(): client.models for client in providers},
        timestamp=time.time(),
    )
