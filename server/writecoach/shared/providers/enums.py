"""
Provider enums for the failover chain.
"""

from enum import Enum


class Provider(Enum):
    """
    Provider identity, declared in failover priority order.
    Values double as registry names and store key suffixes.
    """
    PRIMARY = "gemini"
    SECONDARY = "openrouter"
    TERTIARY = "github"

    @classmethod
    def priority_order(cls) -> list["Provider"]:
        return list(cls)
