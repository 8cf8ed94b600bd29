import os
import uuid

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CONVERSATION_LOCK_ENABLED"] = "0"
os.environ.setdefault("OPENAI_API_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient

import dm_assistant.config.config as configs
from dm_assistant.client.db.psql import session_scope
from dm_assistant.db.models import Coach, CourseFile, Offer
from dm_assistant.db.session import Base, engine
from dm_assistant.main import app


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client():
    return TestClient(app)


@pytest.fixture
def make_coach():
    def _make(**overrides) -> str:
        values = {
            "id": configs.DEFAULT_COACH_ID,
            "user_id": str(uuid.uuid4()),
            "name": "Jordan Lee",
            "email": "jordan@example.com",
            "plan": "basic",
        }
        values.update(overrides)
        with session_scope() as db:
            db.add(Coach(**values))
        return values["id"]

    return _make


@pytest.fixture
def make_offer():
    def _make(coach_id: str, **overrides) -> str:
        values = {
            "coach_id": coach_id,
            "name": "Starter Program",
            "tracking_slug": "starter",
            "target_url": "https://shop.example.com/starter",
            "base_price": 497,
            "is_active": True,
        }
        values.update(overrides)
        with session_scope() as db:
            offer = Offer(**values)
            db.add(offer)
            db.flush()
            return offer.id

    return _make


@pytest.fixture
def make_course_file():
    def _make(coach_id: str, filename: str = "notes.txt") -> str:
        with session_scope() as db:
            row = CourseFile(coach_id=coach_id, filename=filename, file_url=f"https://files.example.com/{filename}")
            db.add(row)
            db.flush()
            return row.id

    return _make
