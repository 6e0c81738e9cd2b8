from .coach_service import CoachResponse, WritingCoachService

__all__ = ["CoachResponse", "WritingCoachService"]
