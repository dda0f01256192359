"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of kaabhub.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from kaabhub.config import KaabConfig  # noqa: E402
from kaabhub.database.models import Base, Question, User  # noqa: E402

TEST_PASSWORD = "secret123"


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all KAAB HUB tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in the rate limiter and the
    WebSocket endpoint).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def test_config() -> KaabConfig:
    """Config with throttling off; rate-limit tests build their own."""
    return KaabConfig(
        community_name="KAAB HUB Test",
        api_port=5000,
        mutation_rate_limit=0,
        seed_mentors=True,
    )


@pytest.fixture
def app_context(db_engine, test_config):
    from kaabhub.api.context import AppContext

    return AppContext.create(test_config, engine=db_engine)


@pytest.fixture
def client(app_context):
    """Create a FastAPI TestClient with raise_server_exceptions=False."""
    from fastapi.testclient import TestClient

    from kaabhub.api.main import create_app

    return TestClient(create_app(app_context), raise_server_exceptions=False)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def make_user(
    session: Session,
    name: str = "Student",
    email: str | None = None,
    *,
    is_admin: bool = False,
) -> User:
    """Register a user directly through the service layer."""
    from kaabhub.services import user_service

    user = user_service.register_user(
        session,
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        password=TEST_PASSWORD,
    )
    if is_admin:
        user.is_admin = True
        session.commit()
    return user


def make_question(session: Session, author: User, **overrides) -> Question:
    from kaabhub.services import question_service

    fields = {
        "title": "How do I reverse a list in Python?",
        "content": "I tried a for loop but it feels clumsy.",
        "category": "Programming",
        "tags": ["python", "lists"],
    }
    fields.update(overrides)
    return question_service.create_question(session, author, **fields)


def make_token(user_id: int) -> str:
    from kaabhub.api.deps import issue_token

    return issue_token(user_id)


def auth(user_or_id) -> dict:
    user_id = user_or_id if isinstance(user_or_id, int) else user_or_id.id
    return {"Authorization": f"Bearer {make_token(user_id)}"}
