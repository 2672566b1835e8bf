# thinkarena/tests/conftest.py
"""Shared fixtures: throw-away SQLite database, seeded reference data and a
scripted text-completion provider."""
import os
import tempfile
import uuid

# Must be set before thinkarena.db is imported anywhere
_TEST_DB = os.path.join(tempfile.gettempdir(), f"thinkarena_test_{os.getpid()}.db")
if os.path.exists(_TEST_DB):
    os.remove(_TEST_DB)
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB}"

import pytest
from fastapi.testclient import TestClient

from thinkarena.db import Base, engine, SessionLocal
from thinkarena import models
from thinkarena.ai.providers import get_completion_provider
from thinkarena.main import app
from thinkarena.seed_data import seed_reference_data


class FakeProvider:
    """Returns queued replies in order and remembers every prompt."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


@pytest.fixture(scope="session", autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    s = SessionLocal()
    try:
        seed_reference_data(s)
    finally:
        s.close()
    yield
    engine.dispose()
    if os.path.exists(_TEST_DB):
        os.remove(_TEST_DB)


@pytest.fixture()
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def make_user(db):
    def _make(is_admin: bool = False, total_score: int = 0, **fields) -> int:
        user = models.User(
            username=f"student_{uuid.uuid4().hex[:10]}",
            is_admin=is_admin,
            total_score=total_score,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user.id

    return _make


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def fake_provider():
    fake = FakeProvider()
    app.dependency_overrides[get_completion_provider] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_completion_provider, None)
