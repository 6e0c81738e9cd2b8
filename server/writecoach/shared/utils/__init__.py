"""
Utility modules for the web server.
"""

from .hashing import derive_client_identity, normalize_text, request_fingerprint
from .security import (
    SecurityValidationError,
    sanitize_fingerprint,
    sanitize_prompt_for_logging,
    validate_identifier,
    validate_submission_text,
)

__all__ = [
    "derive_client_identity",
    "normalize_text",
    "request_fingerprint",
    "SecurityValidationError",
    "sanitize_fingerprint",
    "sanitize_prompt_for_logging",
    "validate_identifier",
    "validate_submission_text",
]
