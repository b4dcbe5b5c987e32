"""
SQLAlchemy models for database persistence.

Defines the database schema for interview sessions.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class InterviewSessionModel(Base):
    """Database model for interview sessions."""

    __tablename__ = "interview_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    current_step: Mapped[str] = mapped_column(String(20), nullable=False)
    chat_history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    last_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    overall_feedback: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    context: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    # Compare-and-set token; bumped on every write.
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now_utc,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now_utc,
        onupdate=_now_utc,
        nullable=False,
    )
