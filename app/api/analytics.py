# app/api/analytics.py

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_db
from app.db.models import Exercise as DBExercise
from app.models.common import DataResponse
from app.services import analytics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def _validate_range(range_: str) -> str:
    if range_ not in analytics.VALID_RANGES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid date range. Valid options: {', '.join(analytics.VALID_RANGES)}",
        )
    return range_


@router.get("/workout-duration", response_model=DataResponse[Dict[str, Any]])
def workout_duration(
    range_: str = Query(analytics.DEFAULT_RANGE, alias="range"),
    db: Session = Depends(get_db),
):
    """Duration of every completed workout in the range, oldest first."""
    range_ = _validate_range(range_)
    try:
        data = analytics.workout_duration_history(db, range_)
    except SQLAlchemyError as e:
        logger.error(f"Error in workout duration analytics: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch workout duration data")
    return DataResponse(success=True, message=f"{data['totalWorkouts']} workouts", data=data)


@router.get("/exercises", response_model=DataResponse[Dict[str, Any]])
def exercises_from_history(
    range_: str = Query(analytics.DEFAULT_RANGE, alias="range"),
    db: Session = Depends(get_db),
):
    """Exercises found in completed sessions plus workout frequency for the range."""
    range_ = _validate_range(range_)
    try:
        exercises = analytics.available_exercises_from_history(db)
        frequency = analytics.workout_frequency_stats(db, range_)
    except SQLAlchemyError as e:
        logger.error(f"Error in exercises analytics: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch exercises data")

    stats = {
        **frequency,
        "totalExercisesUsed": len(exercises),
        "mostUsedExercise": analytics.most_used_exercise(exercises),
    }
    return DataResponse(
        success=True,
        message=f"{len(exercises)} exercises",
        data={"exercises": exercises, "stats": stats},
    )


@router.get("/exercise-progression/{exerciseId}", response_model=DataResponse[Dict[str, Any]])
def exercise_progression(
    exerciseId: int,
    range_: str = Query(analytics.DEFAULT_RANGE, alias="range"),
    db: Session = Depends(get_db),
):
    range_ = _validate_range(range_)
    if not db.query(DBExercise.id).filter(DBExercise.id == exerciseId).first():
        raise HTTPException(status_code=404, detail="Exercise not found")

    try:
        points = analytics.exercise_progression(db, exerciseId, range_)
    except SQLAlchemyError as e:
        logger.error(f"Error in exercise progression analytics for {exerciseId}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch exercise progression data")

    return DataResponse(
        success=True,
        message=f"{len(points)} sessions",
        data={
            "exerciseId": exerciseId,
            "range": range_,
            "progressions": points,
            "totalSessions": len(points),
            "trends": analytics.calculate_progression_trends(points),
        },
    )
