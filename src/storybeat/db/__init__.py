"""Database models and session management."""

from storybeat.db.models import Base, ProjectRecord
from storybeat.db.session import SessionLocal, get_session, get_session_context, init_db

__all__ = [
    "Base",
    "ProjectRecord",
    "SessionLocal",
    "get_session",
    "get_session_context",
    "init_db",
]
