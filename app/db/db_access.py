# app/db/db_access.py

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.database import get_db_session
from app.services.workout_analysis import PlannedExercise
from .models import SessionExercise, WorkoutSession

logger = logging.getLogger(__name__)


class DBResult:
    """Standardized result object for database operations."""

    def __init__(self, success: bool, message: str, data: Optional[Any] = None):
        self.success = success
        self.message = message
        self.data = data

    @property
    def id(self) -> Optional[str]:
        if isinstance(self.data, str):
            return self.data
        if isinstance(self.data, dict) and "id" in self.data:
            return self.data["id"]
        if hasattr(self.data, "id"):
            return str(self.data.id)
        return None

    def __bool__(self) -> bool:
        return self.success


# ------------------------------------------------------------------
# SESSION LOOKUPS
# ------------------------------------------------------------------

def load_session(db: Session, session_id: str) -> Optional[WorkoutSession]:
    """Session with its planned exercises (and their library rows) loaded."""
    return (
        db.query(WorkoutSession)
        .options(joinedload(WorkoutSession.session_exercises).joinedload(SessionExercise.exercise))
        .filter(WorkoutSession.id == session_id)
        .first()
    )


def planned_sequence(session: WorkoutSession) -> List[PlannedExercise]:
    """Build the ordered planned-exercise sequence used by the execution core."""
    return [
        PlannedExercise(
            exercise_id=se.exercise_id,
            order=se.order,
            sets=se.sets,
            reps=se.reps,
            duration_seconds=se.duration_seconds,
            rest_between_sets=se.rest_between_sets,
            rest_after=se.rest_after,
            session_exercise_id=se.id,
            name=se.exercise.name if se.exercise else None,
        )
        for se in sorted(session.session_exercises, key=lambda se: se.order)
    ]


def find_session_exercise(
    session: WorkoutSession,
    exercise_id: int,
    session_exercise_id: Optional[str] = None,
    taken: Iterable[str] = (),
) -> Optional[SessionExercise]:
    """Match a result to its planned row.

    The planned row id wins when given; otherwise the first row for the
    exercise that has not already been matched is used, so an exercise
    planned twice gets its results in order.
    """
    if session_exercise_id:
        for se in session.session_exercises:
            if se.id == session_exercise_id:
                return se
        return None

    taken = set(taken)
    for se in sorted(session.session_exercises, key=lambda se: se.order):
        if se.exercise_id == exercise_id and se.id not in taken:
            return se
    return None


def _apply_results(session: WorkoutSession, results: List[Dict[str, Any]]) -> Optional[str]:
    """Write actual sets/reps/weights. Returns an error message on mismatch."""
    matched: List[str] = []
    for result in results:
        se = find_session_exercise(
            session,
            result["exercise_id"],
            result.get("session_exercise_id"),
            taken=matched,
        )
        if se is None:
            return f"Exercise {result['exercise_id']} is not part of session {session.id}"
        matched.append(se.id)
        se.actual_sets = result.get("actual_sets", 0)
        se.actual_reps = list(result.get("actual_reps") or [])
        se.weight = list(result.get("weight") or [])
    return None


# ------------------------------------------------------------------
# RESULT PERSISTENCE
# ------------------------------------------------------------------

def update_session_exercise_results(session_id: str, result: Dict[str, Any]) -> DBResult:
    """Record actual performance for one planned exercise."""
    with get_db_session() as db:
        try:
            session = load_session(db, session_id)
            if not session:
                return DBResult(False, "Session not found")

            error = _apply_results(session, [result])
            if error:
                db.rollback()
                return DBResult(False, error)

            db.commit()
            return DBResult(True, "Exercise results updated", session_id)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating exercise results for session {session_id}: {e}")
            return DBResult(False, f"Error updating exercise results: {e}")


def complete_session(session_id: str, duration: int, exercises: List[Dict[str, Any]]) -> DBResult:
    """Mark a session completed with its duration and per-exercise results."""
    with get_db_session() as db:
        try:
            session = load_session(db, session_id)
            if not session:
                return DBResult(False, "Session not found")

            error = _apply_results(session, exercises)
            if error:
                db.rollback()
                return DBResult(False, error)

            session.completed = True
            session.terminated_early = False
            session.duration = duration
            db.commit()
            logger.info(f"Session {session_id} completed ({duration}s, {len(exercises)} exercises)")
            return DBResult(True, "Session completed", session_id)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error completing session {session_id}: {e}")
            return DBResult(False, f"Error completing session: {e}")


def terminate_session(session_id: str, duration: int, exercises: List[Dict[str, Any]]) -> DBResult:
    """
    Save a workout that was ended early.
    Only the exercises with at least one attempted set are passed in; the
    remaining planned rows keep their empty results.
    """
    with get_db_session() as db:
        try:
            session = load_session(db, session_id)
            if not session:
                return DBResult(False, "Session not found")

            error = _apply_results(session, exercises)
            if error:
                db.rollback()
                return DBResult(False, error)

            session.completed = True
            session.terminated_early = True
            session.duration = duration
            db.commit()
            logger.info(f"Session {session_id} terminated early ({duration}s, {len(exercises)} exercises saved)")
            return DBResult(True, "Partial workout saved", session_id)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error terminating session {session_id}: {e}")
            return DBResult(False, f"Error saving partial workout: {e}")


class DBSessionRecorder:
    """Hands a finished execution over to the database."""

    def record_completion(self, session_id: str, duration: int, exercises: List[Dict[str, Any]]) -> DBResult:
        return complete_session(session_id, duration, exercises)

    def record_termination(self, session_id: str, duration: int, exercises: List[Dict[str, Any]]) -> DBResult:
        return terminate_session(session_id, duration, exercises)
