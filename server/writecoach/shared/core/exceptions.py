"""
Custom exceptions for the web server.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class APIError(HTTPException):
    """Base API error class."""

    def __init__(
        self,
        status_code: int,
        detail: Any,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class InvalidRequestError(APIError):
    """Raised when a submission fails validation."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "message": message}
        )


class InvalidCertificateError(APIError):
    """Raised when an unknown certificate or band is requested."""

    def __init__(self, certificate_id: str, band: Optional[str] = None):
        message = f"Invalid certificate ID: {certificate_id}"
        if band is not None:
            message = f"Band {band} is not offered for certificate {certificate_id}"
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_certificate", "message": message}
        )


class UserBlockedError(APIError):
    """Raised when a client is temporarily blocked after provider exhaustion."""

    def __init__(self, retry_after: int = 60):
        self.retry_after = retry_after
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "temporarily_blocked",
                "message": f"All AI providers are busy. Please try again in {retry_after} seconds.",
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)}
        )


class RateLimitError(APIError):
    """Raised when rate limit is exceeded."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[int] = None):
        self.retry_after = retry_after
        headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"error": "rate_limited", "message": message, "retry_after": retry_after},
            headers=headers
        )


class AllProvidersExhaustedError(APIError):
    """Raised when no provider in the failover chain produced text."""

    def __init__(self, reason: str, message: str, retry_after: int = 60):
        self.reason = reason
        self.retry_after = retry_after
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "providers_exhausted",
                "reason": reason,
                "message": message,
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)}
        )


class ResponseParseError(APIError):
    """Raised when provider text never yields a schema-valid payload."""

    def __init__(self, message: str, raw_response: Optional[str] = None):
        self.raw_response = raw_response
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Failed to parse AI response",
                "type": "parse_failure",
                "message": message,
                "raw_response": (raw_response or "")[:500],
            }
        )


class ServiceUnavailableError(APIError):
    """Raised when a required service is unavailable."""

    def __init__(self, service_name: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{service_name} service is unavailable"
        )
