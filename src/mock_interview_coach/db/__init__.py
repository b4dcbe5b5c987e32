"""
Database module for persistence.

Provides the SQLAlchemy session model and the session store
implementations.
"""

from mock_interview_coach.db.engine import create_engine, create_session_factory, init_models
from mock_interview_coach.db.models import Base, InterviewSessionModel
from mock_interview_coach.db.repository import (
    InMemorySessionStore,
    SessionStore,
    SqlAlchemySessionStore,
)

__all__ = [
    "Base",
    "InterviewSessionModel",
    "SessionStore",
    "SqlAlchemySessionStore",
    "InMemorySessionStore",
    "create_engine",
    "create_session_factory",
    "init_models",
]
