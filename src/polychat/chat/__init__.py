from .session import ChatSession, Notification, TurnState
from .transcript import transcript

__all__ = ["ChatSession", "Notification", "TurnState", "transcript"]
