# app/models/execution.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.models.common import CamelModel


class TickRequest(CamelModel):
    seconds: int = Field(1, ge=0)


class RecordSetRequest(CamelModel):
    value: float = Field(..., ge=0, allow_inf_nan=False)
    weight: float = Field(0, ge=0, allow_inf_nan=False)


class PlannedExercise(CamelModel):
    exercise_id: int
    session_exercise_id: Optional[str] = None
    name: Optional[str] = None
    order: int
    sets: int
    reps: Optional[int] = None
    duration_seconds: Optional[int] = None
    rest_between_sets: int
    rest_after: int


class Countdown(CamelModel):
    remaining_seconds: int
    active: bool


class WorkoutStats(CamelModel):
    exercises_completed: int
    total_exercises: int
    sets_completed: int
    total_planned_sets: int
    actual_duration: int
    total_volume: float
    completion_percentage: int


class Handoff(CamelModel):
    kind: str
    status: str
    message: str = ""
    attempts: int = 0
    duration: int


class ExecutionSnapshot(CamelModel):
    session_id: str
    phase: str
    warmup_seconds: int
    current_exercise_index: int
    current_set_number: int
    current_exercise: Optional[PlannedExercise] = None
    planned: List[PlannedExercise]
    countdown: Countdown
    completed_sets: List[List[float]]
    weights: List[List[float]]
    overall_progress: int
    elapsed_seconds: int
    elapsed_display: str
    session_start_time: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    stats: WorkoutStats
    summary: str
    handoff: Optional[Handoff] = None
