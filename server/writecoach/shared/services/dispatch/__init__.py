from .dispatcher import FailoverDispatcher

__all__ = ["FailoverDispatcher"]
