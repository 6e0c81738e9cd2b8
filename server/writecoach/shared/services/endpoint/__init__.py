from .factory import EndpointFactory

__all__ = ["EndpointFactory"]
