# app/services/analytics.py
"""History analytics over completed sessions."""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models import Exercise, SessionExercise, WorkoutSession

logger = logging.getLogger(__name__)

RANGE_DAYS = {
    "30d": 30,
    "3m": 90,
    "6m": 180,
    "1y": 365,
}
VALID_RANGES = tuple(RANGE_DAYS)
DEFAULT_RANGE = "30d"


def _round(value: float, digits: int = 0) -> float:
    # Half-up, matching how the charts round on the client
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0


def get_date_from_range(range_: str, now: Optional[datetime] = None) -> datetime:
    if range_ not in RANGE_DAYS:
        raise ValueError(f"Invalid date range. Valid options: {', '.join(VALID_RANGES)}")
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=RANGE_DAYS[range_])


# --------------------------- workout duration ------------------------------

def workout_duration_history(db: Session, range_: str = DEFAULT_RANGE) -> Dict[str, Any]:
    start_date = get_date_from_range(range_)
    sessions = (
        db.query(WorkoutSession)
        .filter(
            WorkoutSession.completed.is_(True),
            WorkoutSession.duration.isnot(None),
            WorkoutSession.date >= start_date,
        )
        .order_by(WorkoutSession.date.asc())
        .all()
    )

    workouts = [
        {
            "date": s.date.date().isoformat(),
            "duration": s.duration or 0,
            "sessionId": s.id,
            "title": s.title,
        }
        for s in sessions
    ]
    average = _round(_mean([w["duration"] for w in workouts])) if workouts else 0

    return {
        "range": range_,
        "workouts": workouts,
        "totalWorkouts": len(workouts),
        "averageDuration": average,
    }


# --------------------------- exercise progression --------------------------

def exercise_progression(db: Session, exercise_id: int, range_: str = DEFAULT_RANGE) -> List[Dict[str, Any]]:
    """One point per completed session in range that recorded results for the exercise."""
    start_date = get_date_from_range(range_)
    rows = (
        db.query(SessionExercise, WorkoutSession, Exercise)
        .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
        .join(Exercise, SessionExercise.exercise_id == Exercise.id)
        .filter(
            SessionExercise.exercise_id == exercise_id,
            SessionExercise.actual_sets.isnot(None),
            WorkoutSession.completed.is_(True),
            WorkoutSession.date >= start_date,
        )
        .order_by(WorkoutSession.date.asc(), SessionExercise.order.asc())
        .all()
    )

    points = []
    for se, session, exercise in rows:
        values = list(se.actual_reps or [])
        weights = list(se.weight or [])
        is_duration_based = bool(exercise.is_duration_based)

        # actual_reps holds seconds for duration-based exercises
        average_value = _mean(values)
        total_volume = sum(
            value * (weights[i] if i < len(weights) else 0) for i, value in enumerate(values)
        )

        points.append({
            "date": session.date.date().isoformat(),
            "sessionId": session.id,
            "actualSets": se.actual_sets or 0,
            "averageReps": 0 if is_duration_based else _round(average_value, 1),
            "averageWeight": _round(_mean(weights), 1),
            "totalVolume": _round(total_volume),
            "averageDuration": _round(average_value, 1) if is_duration_based else 0,
            "isDurationBased": is_duration_based,
        })
    return points


def calculate_progression_trends(points: List[Dict[str, Any]]) -> Dict[str, float]:
    """First-to-last change across a progression series."""
    if len(points) < 2:
        return {
            "repsChange": 0,
            "weightChange": 0,
            "volumeChange": 0,
            "repsPercentage": 0,
            "weightPercentage": 0,
            "volumePercentage": 0,
        }

    first, last = points[0], points[-1]
    reps_change = last["averageReps"] - first["averageReps"]
    weight_change = last["averageWeight"] - first["averageWeight"]
    volume_change = last["totalVolume"] - first["totalVolume"]

    def pct(change: float, base: float) -> int:
        return _round(change / base * 100) if base > 0 else 0

    return {
        "repsChange": _round(reps_change, 1),
        "weightChange": _round(weight_change, 1),
        "volumeChange": _round(volume_change),
        "repsPercentage": pct(reps_change, first["averageReps"]),
        "weightPercentage": pct(weight_change, first["averageWeight"]),
        "volumePercentage": pct(volume_change, first["totalVolume"]),
    }


# --------------------------- exercise history ------------------------------

def available_exercises_from_history(db: Session) -> List[Dict[str, Any]]:
    """Exercises that appear in completed sessions, most recently used first."""
    rows = (
        db.query(
            Exercise.id,
            Exercise.name,
            Exercise.category,
            func.count(func.distinct(WorkoutSession.id)).label("total_sessions"),
            func.max(WorkoutSession.date).label("last_used"),
        )
        .join(SessionExercise, SessionExercise.exercise_id == Exercise.id)
        .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
        .filter(WorkoutSession.completed.is_(True))
        .group_by(Exercise.id, Exercise.name, Exercise.category)
        .all()
    )

    exercises = [
        {
            "id": row.id,
            "name": row.name,
            "category": row.category,
            "totalSessions": row.total_sessions,
            "lastUsed": row.last_used,
        }
        for row in rows
    ]
    exercises.sort(key=lambda e: e["lastUsed"], reverse=True)
    return exercises


def workout_frequency_stats(db: Session, range_: str = DEFAULT_RANGE) -> Dict[str, Any]:
    start_date = get_date_from_range(range_)
    total_workouts = (
        db.query(WorkoutSession)
        .filter(
            WorkoutSession.completed.is_(True),
            WorkoutSession.date >= start_date,
        )
        .count()
    )

    period = RANGE_DAYS[range_]
    per_day = total_workouts / period
    return {
        "totalWorkouts": total_workouts,
        "period": period,
        "averagePerDay": _round(per_day, 2),
        "averagePerWeek": _round(per_day * 7, 2),
    }


def most_used_exercise(exercises: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Highest session count; ties go to the most recently used."""
    if not exercises:
        return None
    # exercises are already ordered most recent first, and max() keeps the first maximum
    return max(exercises, key=lambda e: e["totalSessions"])
