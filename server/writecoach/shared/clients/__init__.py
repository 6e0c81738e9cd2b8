"""
Client modules for external services.
"""

from .store import KeyValueStore, MemoryStore, RedisStore, StoreUnavailable

__all__ = ["KeyValueStore", "MemoryStore", "RedisStore", "StoreUnavailable"]
