# app/api/exercises.py

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.database import get_db
from app.db.models import Exercise as DBExercise, SessionExercise as DBSessionExercise
from app.models.common import BaseResponse, DataResponse
from app.models.exercise import Exercise, ExerciseCreate, ExerciseUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exercises", tags=["Exercises"])


def _get_exercise_or_404(db: Session, exercise_id: int) -> DBExercise:
    exercise = db.query(DBExercise).filter(DBExercise.id == exercise_id).first()
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


def _ensure_unique_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(DBExercise).filter(DBExercise.name == name)
    if exclude_id is not None:
        query = query.filter(DBExercise.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"An exercise named '{name}' already exists")


@router.get("", response_model=DataResponse[List[Exercise]])
def list_exercises(db: Session = Depends(get_db)):
    """Get the whole exercise library, sorted by name."""
    exercises = db.query(DBExercise).order_by(DBExercise.name.asc()).all()
    return DataResponse(
        success=True,
        message=f"{len(exercises)} exercises",
        data=[Exercise.model_validate(e) for e in exercises],
    )


@router.get("/{exercise_id}", response_model=DataResponse[Exercise])
def get_exercise(exercise_id: int, db: Session = Depends(get_db)):
    exercise = _get_exercise_or_404(db, exercise_id)
    return DataResponse(success=True, message="Exercise found", data=Exercise.model_validate(exercise))


@router.post("", response_model=DataResponse[Exercise], status_code=201)
def create_exercise(payload: ExerciseCreate, db: Session = Depends(get_db)):
    _ensure_unique_name(db, payload.name)

    exercise = DBExercise(**payload.model_dump())
    db.add(exercise)
    try:
        db.commit()
        db.refresh(exercise)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Duplicate exercise '{payload.name}': {e}")
        raise HTTPException(status_code=409, detail=f"An exercise named '{payload.name}' already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating exercise: {e}")
        raise HTTPException(status_code=500, detail="Failed to create exercise")

    logger.info(f"Created exercise {exercise.id} '{exercise.name}'")
    return DataResponse(success=True, message="Exercise created", data=Exercise.model_validate(exercise))


@router.put("/{exercise_id}", response_model=DataResponse[Exercise])
def update_exercise(exercise_id: int, payload: ExerciseUpdate, db: Session = Depends(get_db)):
    exercise = _get_exercise_or_404(db, exercise_id)
    _ensure_unique_name(db, payload.name, exclude_id=exercise_id)

    for field, value in payload.model_dump().items():
        setattr(exercise, field, value)

    try:
        db.commit()
        db.refresh(exercise)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Duplicate exercise '{payload.name}': {e}")
        raise HTTPException(status_code=409, detail=f"An exercise named '{payload.name}' already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating exercise {exercise_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update exercise")

    return DataResponse(success=True, message="Exercise updated", data=Exercise.model_validate(exercise))


@router.delete("/{exercise_id}", response_model=BaseResponse)
def delete_exercise(exercise_id: int, db: Session = Depends(get_db)):
    exercise = _get_exercise_or_404(db, exercise_id)

    in_use = (
        db.query(DBSessionExercise)
        .filter(DBSessionExercise.exercise_id == exercise_id)
        .count()
    )
    if in_use:
        raise HTTPException(
            status_code=409,
            detail=f"Exercise is used in {in_use} session exercise(s) and cannot be deleted",
        )

    try:
        db.delete(exercise)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting exercise {exercise_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete exercise")

    return BaseResponse(success=True, message="Exercise deleted")
