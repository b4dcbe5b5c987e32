"""
Tests for the session stores.
"""

from pathlib import Path

import pytest

from mock_interview_coach.agents.fallback_assessment import FallbackAssessmentGenerator
from mock_interview_coach.db import (
    InMemorySessionStore,
    SessionStore,
    SqlAlchemySessionStore,
    create_engine,
    create_session_factory,
    init_models,
)
from mock_interview_coach.errors import NotFound, StaleSessionError
from mock_interview_coach.orchestrator.schemas import (
    InterviewContext,
    Message,
    MessageRole,
    SessionStatus,
)

CONTEXT = InterviewContext(job_role="Backend Engineer", domain="Payments", skills=["Python", "SQL"])


async def _exercise_store(store: SessionStore) -> None:
    created = await store.create(CONTEXT)
    assert created.version == 0
    assert created.status == SessionStatus.ACTIVE

    loaded = await store.get(created.id)
    assert loaded.context == CONTEXT
    assert loaded.chat_history == []

    loaded.chat_history.append(Message(role=MessageRole.AI, content="Why payments?"))
    saved = await store.save(loaded)
    assert saved.version == 1

    reloaded = await store.get(created.id)
    assert reloaded.version == 1
    assert reloaded.chat_history == [Message(role=MessageRole.AI, content="Why payments?")]

    # The copy read at version 0 is now stale.
    with pytest.raises(StaleSessionError):
        await store.save(loaded)

    assessment = FallbackAssessmentGenerator().generate([])
    reloaded.status = SessionStatus.COMPLETED
    reloaded.overall_feedback = assessment
    await store.save(reloaded)

    completed = await store.get(created.id)
    assert completed.status == SessionStatus.COMPLETED
    assert completed.overall_feedback == assessment
    assert completed.version == 2

    with pytest.raises(NotFound):
        await store.get("missing")

    missing = completed.model_copy(update={"id": "missing"})
    with pytest.raises(NotFound):
        await store.save(missing)


@pytest.mark.asyncio
async def test_in_memory_store() -> None:
    await _exercise_store(InMemorySessionStore())


@pytest.mark.asyncio
async def test_in_memory_store_isolates_documents() -> None:
    store = InMemorySessionStore()
    created = await store.create(CONTEXT)

    created.chat_history.append(Message(role=MessageRole.AI, content="Unsaved"))

    assert (await store.get(created.id)).chat_history == []


@pytest.mark.asyncio
async def test_sqlalchemy_store(tmp_path: Path) -> None:
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'sessions.db'}")
    try:
        await init_models(engine)
        await _exercise_store(SqlAlchemySessionStore(create_session_factory(engine)))
    finally:
        await engine.dispose()
