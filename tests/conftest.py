"""Pytest configuration and shared fixtures for the test suite."""

import asyncio
import os

# Point the app at a throwaway database before anything imports core.database
os.environ["DATABASE_URL"] = "sqlite://"

from typing import Iterator, List, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models  # noqa: E402,F401
from core.database import Base, set_sqlite_pragma  # noqa: E402
from services.errors import GenerationError  # noqa: E402
from services.orchestrator import ConversationOrchestrator  # noqa: E402
from utils.config import Settings  # noqa: E402


class FakeEngine:
    """Stands in for ConversationEngine; records every prompt it receives."""

    def __init__(self) -> None:
        self.calls: List[dict] = []
        self.fail_with: Optional[str] = None

    async def generate(self, system_instruction, user_instruction, max_tokens=500, temperature=0.7):
        # Yield like a real network call so concurrent advances interleave
        await asyncio.sleep(0)
        if self.fail_with:
            raise GenerationError(self.fail_with)
        self.calls.append(
            {
                "system": system_instruction,
                "user": user_instruction,
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        )
        return f"reply {len(self.calls)}"


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads, with foreign keys on."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    event.listen(engine, "connect", set_sqlite_pragma)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def db_session(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def orchestrator(db_session, fake_engine, settings) -> ConversationOrchestrator:
    return ConversationOrchestrator(db_session, fake_engine, settings)


@pytest.fixture
def client(session_factory, fake_engine, settings) -> Iterator[TestClient]:
    """TestClient with the database and provider dependencies overridden."""
    from dependencies import get_db, get_engine
    from main import app
    from utils.config import get_settings

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_engine] = lambda: fake_engine
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
