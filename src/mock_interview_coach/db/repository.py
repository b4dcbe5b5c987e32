"""
Repository pattern for session persistence.

Every save is a compare-and-set on the session's version, so two writers
that read the same version cannot both succeed.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mock_interview_coach.db.models import InterviewSessionModel
from mock_interview_coach.errors import NotFound, StaleSessionError, StoreFailure
from mock_interview_coach.orchestrator.schemas import InterviewContext, InterviewSession

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Abstract store for interview session documents."""

    @abstractmethod
    async def get(self, session_id: str) -> InterviewSession:
        """
        Get a session by its ID.

        Args:
            session_id: The session identifier.

        Returns:
            The stored session.

        Raises:
            NotFound: If no session has this ID.
        """
        ...

    @abstractmethod
    async def create(self, context: InterviewContext) -> InterviewSession:
        """
        Create a new active session with an empty history.

        Args:
            context: Mode-specific interview context.

        Returns:
            The created session at version 0.
        """
        ...

    @abstractmethod
    async def save(self, session: InterviewSession) -> InterviewSession:
        """
        Overwrite a session if its stored version still equals ``session.version``.

        Args:
            session: Session carrying the version it was read at.

        Returns:
            The persisted copy with the incremented version.

        Raises:
            NotFound: If the session no longer exists.
            StaleSessionError: If another writer saved first.
        """
        ...


def _to_row(session: InterviewSession) -> dict[str, Any]:
    """Column values for a session, excluding id and version."""
    data = session.model_dump(mode="json")
    return {
        "status": data["status"],
        "current_step": data["current_step"],
        "chat_history": data["chat_history"],
        "last_feedback": data["last_feedback"],
        "overall_feedback": data["overall_feedback"],
        "context": data["context"],
    }


def _from_model(model: InterviewSessionModel) -> InterviewSession:
    return InterviewSession.model_validate(
        {
            "id": model.id,
            "status": model.status,
            "current_step": model.current_step,
            "chat_history": model.chat_history,
            "last_feedback": model.last_feedback,
            "overall_feedback": model.overall_feedback,
            "context": model.context,
            "version": model.version,
            "created_at": model.created_at,
            "updated_at": model.updated_at,
        }
    )


class SqlAlchemySessionStore(SessionStore):
    """Session store backed by an async SQLAlchemy database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize the store.

        Args:
            session_factory: Factory producing database sessions.
        """
        self._session_factory = session_factory

    async def get(self, session_id: str) -> InterviewSession:
        try:
            async with self._session_factory() as db:
                model = await db.get(InterviewSessionModel, session_id)
                if model is None:
                    raise NotFound(session_id)
                return _from_model(model)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load session {session_id}: {e}")
            raise StoreFailure(f"Failed to load session {session_id}") from e

    async def create(self, context: InterviewContext) -> InterviewSession:
        session = InterviewSession(context=context)
        model = InterviewSessionModel(
            id=session.id,
            version=session.version,
            created_at=session.created_at,
            updated_at=session.updated_at,
            **_to_row(session),
        )
        try:
            async with self._session_factory() as db, db.begin():
                db.add(model)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create session: {e}")
            raise StoreFailure("Failed to create session") from e

        logger.debug(f"Created session {session.id}")
        return session

    async def save(self, session: InterviewSession) -> InterviewSession:
        now = datetime.now(timezone.utc)
        stmt = (
            update(InterviewSessionModel)
            .where(
                InterviewSessionModel.id == session.id,
                InterviewSessionModel.version == session.version,
            )
            .values(**_to_row(session), version=session.version + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as db, db.begin():
                result = await db.execute(stmt)
                if result.rowcount == 0:
                    exists = await db.scalar(
                        select(InterviewSessionModel.id).where(InterviewSessionModel.id == session.id)
                    )
                    if exists is None:
                        raise NotFound(session.id)
                    raise StaleSessionError(session.id, session.version)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save session {session.id}: {e}")
            raise StoreFailure(f"Failed to save session {session.id}") from e

        return session.model_copy(update={"version": session.version + 1, "updated_at": now})


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    Documents are kept serialized so callers never share mutable state with
    the store.
    """

    def __init__(self) -> None:
        self._documents: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> InterviewSession:
        document = self._documents.get(session_id)
        if document is None:
            raise NotFound(session_id)
        return InterviewSession.model_validate_json(document)

    async def create(self, context: InterviewContext) -> InterviewSession:
        session = InterviewSession(context=context)
        async with self._lock:
            self._documents[session.id] = session.model_dump_json()
        return session

    async def save(self, session: InterviewSession) -> InterviewSession:
        async with self._lock:
            document = self._documents.get(session.id)
            if document is None:
                raise NotFound(session.id)
            stored_version = InterviewSession.model_validate_json(document).version
            if stored_version != session.version:
                raise StaleSessionError(session.id, session.version)

            saved = session.model_copy(
                update={"version": session.version + 1, "updated_at": datetime.now(timezone.utc)}
            )
            self._documents[session.id] = saved.model_dump_json()
        return saved
