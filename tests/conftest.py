"""
Test fixtures for the Repforge API.

The environment is pointed at a throwaway SQLite database, a temp photo
directory and the in-memory execution store *before* the app is imported,
so no test ever needs Postgres or Redis.
"""

import os
import shutil
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_TMP = tempfile.mkdtemp(prefix="repforge-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["PHOTO_STORAGE_PATH"] = os.path.join(_TMP, "photos")
os.environ["EXECUTION_STORE"] = "memory"

from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.database import Base, SessionLocal, engine
from app.core.dependencies import get_execution_store
from app.db.db_access import DBResult
from app.db.models import Exercise, SessionExercise, WorkoutSession
from app.main import app

Base.metadata.create_all(bind=engine)


# ---------------------------------------------------------------------------
# Database / storage isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_state():
    """Empty every table, the photo directory and the live executions."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    shutil.rmtree(settings.PHOTO_STORAGE_PATH, ignore_errors=True)
    get_execution_store().clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


def _add_exercise(db, **overrides) -> Exercise:
    data = {
        "name": "Push-ups",
        "category": "FORCE",
        "muscle_groups": ["chest", "triceps"],
        "is_custom": False,
        "is_duration_based": False,
        "default_sets": 3,
        "default_reps": 12,
        "default_rest_between_sets": 60,
        "default_rest_after": 120,
    }
    data.update(overrides)
    exercise = Exercise(**data)
    db.add(exercise)
    db.commit()
    db.refresh(exercise)
    return exercise


@pytest.fixture
def push_ups(db) -> Exercise:
    return _add_exercise(db)


@pytest.fixture
def squats(db) -> Exercise:
    return _add_exercise(db, name="Squats", muscle_groups=["quadriceps", "glutes"], default_reps=15)


@pytest.fixture
def plank(db) -> Exercise:
    return _add_exercise(
        db,
        name="Plank",
        muscle_groups=["abs"],
        is_duration_based=True,
        default_reps=None,
        default_duration=30,
    )


@pytest.fixture
def make_session(db):
    """Factory: insert a session with planned exercises straight into the database."""

    def _make(
        exercises: List[Dict[str, Any]],
        title: str = "Morning workout",
        warmup_seconds: int = 0,
        is_template: bool = False,
        completed: bool = False,
        duration: Optional[int] = None,
        date: Optional[datetime] = None,
    ) -> WorkoutSession:
        session = WorkoutSession(
            title=title,
            date=date or datetime.now(timezone.utc),
            warmup_seconds=warmup_seconds,
            is_template=is_template,
            completed=completed,
            duration=duration,
        )
        for order, planned in enumerate(exercises, start=1):
            row = {"order": order, "rest_between_sets": 60, "rest_after": 120}
            row.update(planned)
            session.session_exercises.append(SessionExercise(**row))
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    return _make


# ---------------------------------------------------------------------------
# Execution collaborators
# ---------------------------------------------------------------------------


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


class FakeRecorder:
    """Records hand-offs instead of writing them; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.completions: List[tuple] = []
        self.terminations: List[tuple] = []

    def _result(self) -> DBResult:
        if self.fail:
            return DBResult(False, "Database unavailable")
        return DBResult(True, "Saved")

    def record_completion(self, session_id, duration, exercises) -> DBResult:
        self.completions.append((session_id, duration, exercises))
        return self._result()

    def record_termination(self, session_id, duration, exercises) -> DBResult:
        self.terminations.append((session_id, duration, exercises))
        return self._result()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> FakeRecorder:
    return FakeRecorder()
