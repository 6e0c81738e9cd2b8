from .visitor_counter import VisitorCounter

__all__ = ["VisitorCounter"]
