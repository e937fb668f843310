"""Application services."""

from .projects import ProjectService, get_project_service, reset_project_state
from .sessions import Session, SessionService, get_session_service, reset_session_state

__all__ = [
    "ProjectService",
    "Session",
    "SessionService",
    "get_project_service",
    "get_session_service",
    "reset_project_state",
    "reset_session_state",
]
