"""Database models for Gamenight."""

from gamenight.models.base import Base, app_session_factory, get_task_session
from gamenight.models.domain import JobRun, PickTransition

__all__ = [
    "Base",
    "app_session_factory",
    "get_task_session",
    "JobRun",
    "PickTransition",
]
