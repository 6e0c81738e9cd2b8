from .cache_service import ResponseCache

__all__ = ["ResponseCache"]
