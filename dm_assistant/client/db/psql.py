from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from dm_assistant.db.session import SessionLocal


@contextmanager
def session_scope() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def upsert_insert(db: Session, model: Any):
    """
    Return an INSERT construct that supports ON CONFLICT for the bound dialect.
    Postgres is the production target; sqlite backs the test suite.
    """
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
