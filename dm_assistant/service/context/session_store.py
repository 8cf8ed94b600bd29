"""
Per-(coach, user handle) conversation state backed by the dm_sessions table.

Read-modify-write cycles are kept inside single transactions: the counter is
bumped with one UPDATE, history rows are locked before they are rewritten and
creation leans on the (coach_id, user_handle) unique key.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

import dm_assistant.config.config as configs
from dm_assistant.client.db.psql import session_scope
from dm_assistant.db.models.dm_session import DMSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    id: str
    coach_id: str
    user_handle: str
    question_count: int
    last_question_at: datetime | None = None
    messages: list = field(default_factory=list)


def _snapshot(row: DMSession) -> SessionState:
    messages = row.messages if isinstance(row.messages, list) else []
    return SessionState(
        id=row.id,
        coach_id=row.coach_id,
        user_handle=row.user_handle,
        question_count=row.question_count or 0,
        last_question_at=row.last_question_at,
        messages=list(messages),
    )


def _select(coach_id: str, user_handle: str):
    return select(DMSession).where(DMSession.coach_id == coach_id, DMSession.user_handle == user_handle)


def peek(coach_id: str, user_handle: str) -> SessionState | None:
    with session_scope() as db:
        row = db.execute(_select(coach_id, user_handle)).scalar_one_or_none()
        return _snapshot(row) if row else None


def get_or_create(coach_id: str, user_handle: str) -> SessionState:
    existing = peek(coach_id, user_handle)
    if existing is not None:
        return existing

    try:
        with session_scope() as db:
            row = DMSession(coach_id=coach_id, user_handle=user_handle, question_count=0, messages=[])
            db.add(row)
            db.flush()
            created = _snapshot(row)
        logger.info("created dm session coach_id=%s user_handle=%s", coach_id, user_handle)
        return created
    except IntegrityError:
        # A concurrent delivery created it first; use that row.
        logger.info("dm session created concurrently coach_id=%s user_handle=%s", coach_id, user_handle)
        winner = peek(coach_id, user_handle)
        if winner is None:
            raise
        return winner


def increment(session: SessionState) -> SessionState:
    now = datetime.now(timezone.utc)
    with session_scope() as db:
        db.execute(
            update(DMSession)
            .where(DMSession.id == session.id)
            .values(question_count=DMSession.question_count + 1, last_question_at=now)
            .execution_options(synchronize_session=False)
        )
        row = db.execute(select(DMSession).where(DMSession.id == session.id)).scalar_one()
        return _snapshot(row)


def append_history(session: SessionState, entries: list[dict]) -> SessionState:
    """Append entries and keep only the most recent HISTORY_CAP of them."""
    with session_scope() as db:
        row = db.execute(
            select(DMSession).where(DMSession.id == session.id).with_for_update()
        ).scalar_one()
        history = row.messages if isinstance(row.messages, list) else []
        row.messages = (list(history) + list(entries))[-configs.HISTORY_CAP:]
        db.flush()
        return _snapshot(row)
