"""
Hash generation utilities.

Digests here are for content addressing and client bucketing only. They are
not integrity checks and carry no security property.
"""

import hashlib
from typing import Mapping, Optional


FIELD_SEPARATOR = "\x1f"


def normalize_text(text: Optional[str]) -> str:
    """Trim, lowercase and collapse whitespace runs."""
    if not text:
        return ""
    return " ".join(text.split()).lower()


def request_fingerprint(user_text: str, reference_text: str, target_profile: str) -> str:
    """
    Deterministic cache key for an analysis request.

    Args:
        user_text: The learner's text
        reference_text: Source text the learner translated
        target_profile: Target certificate/band description

    Returns:
        32-character MD5 hex digest of the normalized fields
    """
    joined = FIELD_SEPARATOR.join(
        normalize_text(part) for part in (user_text, reference_text, target_profile)
    )
    return hashlib.md5(joined.encode("utf-8")).hexdigest()


def derive_client_identity(
    forwarded_for: Optional[str],
    peer_host: Optional[str],
    headers: Mapping[str, str],
    length: int = 16
) -> str:
    """
    Stable identity for rate limiting and blocking.

    Args:
        forwarded_for: Raw X-Forwarded-For header (first hop is used)
        peer_host: Socket peer address, used when no proxy header is present
        headers: Request headers; User-Agent and Accept-Language are digested
        length: Length of the header digest

    Returns:
        "<ip>-<digest>"
    """
    ip = ""
    if forwarded_for:
        ip = forwarded_for.split(",")[0].strip()
    if not ip:
        ip = peer_host or "unknown"

    user_agent = headers.get("user-agent", "unknown")
    language = headers.get("accept-language", "")
    digest = hashlib.sha256(f"{user_agent}|{language}".encode("utf-8")).hexdigest()[:length]
    return f"{ip}-{digest}"
