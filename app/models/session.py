# app/models/session.py

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from app.models.common import CamelModel
from app.models.exercise import Exercise


class SessionExerciseCreate(CamelModel):
    exercise_id: int
    order: int = Field(..., ge=0)
    sets: int = Field(..., ge=1)
    reps: Optional[int] = Field(None, ge=1)
    duration_seconds: Optional[int] = Field(None, ge=1)
    rest_between_sets: int = Field(..., ge=0)
    rest_after: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_reps_or_duration(self):
        # Exactly one target: a rep count or a hold duration
        if (self.reps is None) == (self.duration_seconds is None):
            raise ValueError("Exactly one of reps or durationSeconds must be set")
        return self


class SessionExercise(CamelModel):
    id: str
    exercise_id: int
    session_id: str
    order: int
    sets: int
    reps: Optional[int] = None
    duration_seconds: Optional[int] = None
    rest_between_sets: int
    rest_after: int
    weight: Optional[List[float]] = None
    actual_sets: Optional[int] = None
    actual_reps: Optional[List[float]] = None
    exercise: Optional[Exercise] = None


class SessionCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    date: Optional[datetime] = None
    warmup_seconds: int = Field(0, ge=0)
    is_template: bool = False
    exercises: List[SessionExerciseCreate] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class SessionUpdate(CamelModel):
    title: Optional[str] = None
    date: Optional[datetime] = None
    warmup_seconds: Optional[int] = Field(None, ge=0)
    is_template: Optional[bool] = None
    completed: Optional[bool] = None
    duration: Optional[int] = Field(None, ge=0)


class SessionRename(CamelModel):
    title: Optional[str] = None


class Session(CamelModel):
    id: str
    title: str
    date: datetime
    warmup_seconds: int
    is_template: bool
    duration: Optional[int] = None
    completed: bool
    terminated_early: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    session_exercises: List[SessionExercise] = Field(default_factory=list)


class ExerciseResult(CamelModel):
    """Actual performance for one planned exercise."""
    exercise_id: int
    session_exercise_id: Optional[str] = None
    actual_sets: int = Field(..., ge=0)
    actual_reps: List[float] = Field(default_factory=list)
    weight: List[float] = Field(default_factory=list)


class SessionExerciseResultUpdate(ExerciseResult):
    pass


class CompleteSessionRequest(CamelModel):
    duration: int = Field(..., ge=0)
    exercises: List[ExerciseResult] = Field(default_factory=list)


class TerminateSessionRequest(CamelModel):
    actual_duration: int = Field(..., ge=0)
    completed_exercises: List[ExerciseResult]


class InstantiateTemplateRequest(CamelModel):
    title: Optional[str] = None
    date: Optional[datetime] = None
