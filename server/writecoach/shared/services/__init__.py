"""
Business logic services for the web server.
"""

from .blocking import UserBlockService
from .cache import ResponseCache
from .circuit import CircuitBreaker, CircuitState
from .coach import CoachResponse, WritingCoachService
from .dispatch import FailoverDispatcher
from .endpoint import EndpointFactory
from .rate_limit import ClientRateLimiter, RateLimitResult
from .visitors import VisitorCounter

__all__ = [
    "UserBlockService",
    "ResponseCache",
    "CircuitBreaker",
    "CircuitState",
    "CoachResponse",
    "WritingCoachService",
    "FailoverDispatcher",
    "EndpointFactory",
    "ClientRateLimiter",
    "RateLimitResult",
    "VisitorCounter",
]
