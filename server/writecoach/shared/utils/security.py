"""
Security validation utilities for learner submissions.
"""

import html
import re
from typing import Optional


# Security configuration
MAX_CONTENT_LENGTH = 10000  # characters across a whole submission

# Script injection markers rejected outright
INJECTION_PATTERN = re.compile(r"<script|javascript:|on\w+\s*=", re.IGNORECASE)

SAFE_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_.-]+$')

NON_ALPHANUMERIC_PATTERN = re.compile(r"[^a-zA-Z0-9]")


class SecurityValidationError(ValueError):
    """Raised when security validation fails."""
    pass


def validate_submission_text(content: Optional[str], field_name: str = "content", max_length: int = MAX_CONTENT_LENGTH) -> str:
    """
    Validate one free-text field of a submission.

    Args:
        content: The text to validate
        field_name: Name of the field for error messages
        max_length: Maximum allowed length

    Returns:
        The text, stripped

    Raises:
        SecurityValidationError: If the text is empty, too long or contains script markers
    """
    if content is None or not content.strip():
        raise SecurityValidationError(f"Missing required field: {field_name}")

    if len(content) > max_length:
        raise SecurityValidationError(f"{field_name} too long (max {max_length} characters)")

    if INJECTION_PATTERN.search(content):
        raise SecurityValidationError(f"{field_name} contains disallowed content")

    return content.strip()


def validate_identifier(value: Optional[str], field_name: str = "id", max_length: int = 64) -> str:
    """
    Validate a catalogue identifier such as a certificate id.

    Raises:
        SecurityValidationError: If the identifier is empty, too long or has invalid characters
    """
    if not value:
        raise SecurityValidationError(f"Missing required field: {field_name}")

    if len(value) > max_length:
        raise SecurityValidationError(f"{field_name} too long (max {max_length} characters)")

    if not SAFE_ID_PATTERN.match(value):
        raise SecurityValidationError(f"{field_name} contains invalid characters")

    return value


def sanitize_fingerprint(value: object, min_length: int = 10, max_length: int = 64) -> str:
    """
    Reduce a client-supplied browser fingerprint to at most max_length alphanumerics.

    Raises:
        SecurityValidationError: If the value is not a string or has fewer than
            min_length characters before or after sanitizing
    """
    if not isinstance(value, str) or len(value) < min_length:
        raise SecurityValidationError("Invalid fingerprint")

    sanitized = NON_ALPHANUMERIC_PATTERN.sub("", value)[:max_length]
    if len(sanitized) < min_length:
        raise SecurityValidationError("Invalid fingerprint")
    return sanitized


def sanitize_prompt_for_logging(prompt: str, max_length: int = 100) -> str:
    """
    Sanitize a prompt or AI response for safe logging (escape, flatten, truncate).

    Args:
        prompt: The text to sanitize
        max_length: Maximum length for logging

    Returns:
        Sanitized text safe for logging
    """
    if not prompt:
        return ""

    sanitized = html.escape(prompt).replace('\n', ' ').replace('\r', ' ')

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "..."

    return sanitized
