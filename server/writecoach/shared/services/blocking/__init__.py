from .user_block import UserBlockService

__all__ = ["UserBlockService"]
