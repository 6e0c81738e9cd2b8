"""
Core web server components.
"""

from .config import Settings
from .initializer import Initializer
from .exceptions import (
    APIError,
    AllProvidersExhaustedError,
    InvalidCertificateError,
    InvalidRequestError,
    RateLimitError,
    ResponseParseError,
    ServiceUnavailableError,
    UserBlockedError,
)

__all__ = [
    "Settings",
    "Initializer",
    "APIError",
    "AllProvidersExhaustedError",
    "InvalidCertificateError",
    "InvalidRequestError",
    "RateLimitError",
    "ResponseParseError",
    "ServiceUnavailableError",
    "UserBlockedError",
]
