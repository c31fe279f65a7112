"""Database models package."""

from .user import User, AssistantUsage
from .plan import Plan, ContentLesson
from .feedback import NpsResponse, AppErrorEvent

__all__ = [
    "User",
    "AssistantUsage",
    "Plan",
    "ContentLesson",
    "NpsResponse",
    "AppErrorEvent",
]
