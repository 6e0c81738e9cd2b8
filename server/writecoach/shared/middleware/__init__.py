"""
Middleware components for the web server.
"""

from .monitoring import (
    add_monitoring_middleware,
    record_cache_result,
    record_circuit_opened,
    record_llm_request,
    record_user_block,
)

__all__ = [
    "add_monitoring_middleware",
    "record_cache_result",
    "record_circuit_opened",
    "record_llm_request",
    "record_user_block",
]
