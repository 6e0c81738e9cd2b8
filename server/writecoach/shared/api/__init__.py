"""
Shared API - health and catalogue endpoints.
"""

from . import certificates, health

__all__ = ["certificates", "health"]
