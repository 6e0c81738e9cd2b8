"""
Internal domain models.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from ..providers.enums import Provider


class AttemptOutcome(str, Enum):
    """What happened to one provider during a dispatch."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"              # ProviderUnavailable
    SKIPPED_CIRCUIT_OPEN = "circuit_open"


class DispatchFailure(str, Enum):
    """Why a dispatch ended without text. All map to the same user-facing 503."""
    ALL_PROVIDERS_FAILED = "all_providers_failed"
    ALL_CIRCUITS_OPEN = "all_circuits_open"
    NO_PROVIDERS = "no_providers"


class ProviderAttempt(BaseModel):
    """Log entry for one provider within a dispatch."""
    provider: Provider
    outcome: AttemptOutcome
    model: Optional[str] = None
    error: Optional[str] = None
    failure_count: Optional[int] = None
    duration: float = 0.0


class DispatchResult(BaseModel):
    """Result of one end-to-end dispatch across the failover chain."""
    success: bool
    text: Optional[str] = None
    provider_used: Optional[Provider] = None
    model_used: Optional[str] = None
    error: Optional[str] = None
    failure: Optional[DispatchFailure] = None
    attempts: List[ProviderAttempt] = Field(default_factory=list)


class CircuitStatus(BaseModel):
    """Snapshot of one provider's circuit, for health reporting."""
    provider: Provider
    state: str
    failure_count: Optional[int] = None
    store_reachable: bool = True
