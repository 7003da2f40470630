"""Shared pytest fixtures: settings, in-memory SQLite sessions and fake collaborators."""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from smartdine.config import SmartDineSettings
from smartdine.db.base import Base
from smartdine.db.models import core  # noqa: F401


class _AsyncSessionWrapper:
    def __init__(self, sync_session) -> None:
        self._sync = sync_session

    async def execute(self, *args, **kwargs):
        return self._sync.execute(*args, **kwargs)

    async def get(self, *args, **kwargs):
        return self._sync.get(*args, **kwargs)

    def add(self, obj) -> None:
        self._sync.add(obj)

    async def flush(self) -> None:
        self._sync.flush()

    async def commit(self) -> None:
        self._sync.commit()

    async def rollback(self) -> None:
        self._sync.rollback()

    async def close(self) -> None:
        self._sync.close()


class DummyDatabase:
    """Hands out the same wrapped session for every ``session()`` block."""

    def __init__(self, session) -> None:
        self._session = session
        self.session_calls = 0

    @asynccontextmanager
    async def session(self):
        self.session_calls += 1
        yield self._session
        await self._session.commit()


class FakeRecognizer:
    def __init__(self) -> None:
        self.lang = None
        self.interim_results = None
        self.max_alternatives = None
        self.on_result = None
        self.on_error = None
        self.on_end = None
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True
        self.on_end()

    def emit_result(self, transcript: str) -> None:
        self.on_result(transcript)
        self.on_end()

    def emit_error(self, reason: str = "no-speech") -> None:
        self.on_error(reason)
        self.on_end()


class FakeSpeechCapability:
    def __init__(self) -> None:
        self.recognizers: list[FakeRecognizer] = []

    def create_recognizer(self) -> FakeRecognizer:
        recognizer = FakeRecognizer()
        self.recognizers.append(recognizer)
        return recognizer


class RecordingNavigator:
    def __init__(self) -> None:
        self.results = []

    async def show_results(self, result) -> None:
        self.results.append(result)


@pytest.fixture
def settings() -> SmartDineSettings:
    return SmartDineSettings(
        api={"base_url": "http://backend.test/api", "profile_update_attempts": 2},
        geocoding={"base_url": "https://geo.test"},
        search={"processing_floor_seconds": 0.05},
    )


@pytest.fixture
def speech() -> FakeSpeechCapability:
    return FakeSpeechCapability()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest_asyncio.fixture
async def session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sync_session = SessionLocal()
    try:
        yield _AsyncSessionWrapper(sync_session)
    finally:
        sync_session.close()
        engine.dispose()


@pytest.fixture
def database(session) -> DummyDatabase:
    return DummyDatabase(session)
