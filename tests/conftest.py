"""Shared fixtures for challenge tracker tests."""

import os

# 앱 모듈 import 전에 설정 (Settings는 import 시점에 환경변수를 읽음)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-challenge-tracker-0123")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from challenge_tracker.config.settings import settings
from challenge_tracker.db.database import get_db
from challenge_tracker.main import create_app
from challenge_tracker.routers.challenges import get_clock, get_picker
from challenge_tracker.services.store import InMemoryChallengeStore
from streak_engine.utils.clock import FixedClock

from helpers import TODAY, FirstPicker


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def picker() -> FirstPicker:
    return FirstPicker()


@pytest.fixture
def store() -> InMemoryChallengeStore:
    return InMemoryChallengeStore()


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def client(db_engine, session_factory, clock, picker):
    app = create_app(bind=db_engine)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_picker] = lambda: picker

    with TestClient(app) as test_client:
        yield test_client


def token_for(user_id: str) -> str:
    return jwt.encode({"sub": user_id}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {token_for(user_id)}"}

    return _headers
