# app/services/workout_analysis.py
"""
Pure helpers that summarise a workout in progress.

Everything here works on plain snapshots (the planned exercise sequence plus
the ``completed_sets`` / ``weights`` grids) and never touches the database,
so the same functions serve the live execution, the termination dialog and
the completion hand-off.

A set counts as attempted when its recorded value (reps, or seconds for
duration-based exercises) is greater than zero. A set logged as 0 is
indistinguishable from one that was never attempted.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class PlannedExercise:
    """One exercise's placement inside a session. Exactly one of ``reps`` or
    ``duration_seconds`` is set."""

    exercise_id: int
    order: int
    sets: int
    reps: Optional[int] = None
    duration_seconds: Optional[int] = None
    rest_between_sets: int = 0
    rest_after: int = 0
    session_exercise_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        if (self.reps is None) == (self.duration_seconds is None):
            raise ValueError(
                f"Exercise {self.exercise_id}: exactly one of reps or duration_seconds must be set"
            )
        if self.sets < 1:
            raise ValueError(f"Exercise {self.exercise_id}: sets must be at least 1")
        if self.rest_between_sets < 0 or self.rest_after < 0:
            raise ValueError(f"Exercise {self.exercise_id}: rest durations cannot be negative")

    @property
    def is_duration_based(self) -> bool:
        return self.duration_seconds is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exercise_id": self.exercise_id,
            "order": self.order,
            "sets": self.sets,
            "reps": self.reps,
            "duration_seconds": self.duration_seconds,
            "rest_between_sets": self.rest_between_sets,
            "rest_after": self.rest_after,
            "session_exercise_id": self.session_exercise_id,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannedExercise":
        return cls(**data)


@dataclass
class ExerciseProgress:
    """A planned exercise with the sets actually performed."""

    planned: PlannedExercise
    actual_sets: int
    actual_reps: List[float]
    weight: List[float]

    @property
    def volume(self) -> float:
        return sum(reps * w for reps, w in zip(self.actual_reps, self.weight))


@dataclass
class WorkoutProgress:
    completed: List[ExerciseProgress] = field(default_factory=list)
    partial: List[ExerciseProgress] = field(default_factory=list)
    untouched: List[PlannedExercise] = field(default_factory=list)
    total_completed_sets: int = 0

    @property
    def total_exercises(self) -> int:
        return len(self.completed) + len(self.partial) + len(self.untouched)


@dataclass
class PartialWorkoutStats:
    exercises_completed: int
    total_exercises: int
    sets_completed: int
    total_planned_sets: int
    actual_duration: int
    total_volume: float
    completion_percentage: int


def _attempted(values: Sequence[float], weights: Sequence[float]) -> Tuple[List[float], List[float]]:
    reps: List[float] = []
    kept_weights: List[float] = []
    for index, value in enumerate(values):
        if value > 0:
            reps.append(value)
            kept_weights.append(weights[index] if index < len(weights) else 0)
    return reps, kept_weights


def analyze_progress(
    planned: Sequence[PlannedExercise],
    completed_sets: Sequence[Sequence[float]],
    weights: Sequence[Sequence[float]],
) -> WorkoutProgress:
    """Partition every planned exercise into completed, partial or untouched."""
    progress = WorkoutProgress()

    for index, exercise in enumerate(planned):
        exercise_sets = completed_sets[index] if index < len(completed_sets) else []
        exercise_weights = weights[index] if index < len(weights) else []
        reps, kept_weights = _attempted(exercise_sets, exercise_weights)
        attempted = len(reps)

        if attempted == 0:
            progress.untouched.append(exercise)
            continue

        result = ExerciseProgress(
            planned=exercise,
            actual_sets=attempted,
            actual_reps=reps,
            weight=kept_weights,
        )
        if attempted >= exercise.sets:
            progress.completed.append(result)
        else:
            progress.partial.append(result)
        progress.total_completed_sets += attempted

    return progress


def compute_stats(
    progress: WorkoutProgress,
    planned: Sequence[PlannedExercise],
    elapsed_seconds: int,
) -> PartialWorkoutStats:
    """Aggregate counts and volume for a (possibly partial) workout."""
    total_planned_sets = sum(ex.sets for ex in planned)
    total_volume = sum(ex.volume for ex in progress.completed + progress.partial)

    if total_planned_sets == 0:
        completion_percentage = 0
    else:
        # Half-up rounding, so 12.5% shows as 13%
        completion_percentage = math.floor(progress.total_completed_sets / total_planned_sets * 100 + 0.5)

    return PartialWorkoutStats(
        exercises_completed=len(progress.completed),
        total_exercises=len(planned),
        sets_completed=progress.total_completed_sets,
        total_planned_sets=total_planned_sets,
        actual_duration=elapsed_seconds,
        total_volume=total_volume,
        completion_percentage=completion_percentage,
    )


def has_completable_progress(progress: WorkoutProgress) -> bool:
    """True when at least one exercise has a recorded set worth saving."""
    return bool(progress.completed or progress.partial)


def _result_entry(exercise: PlannedExercise, actual_sets: int, reps: List[float], weight: List[float]) -> Dict[str, Any]:
    return {
        "exercise_id": exercise.exercise_id,
        "session_exercise_id": exercise.session_exercise_id,
        "actual_sets": actual_sets,
        "actual_reps": list(reps),
        "weight": list(weight),
    }


def prepare_termination_payload(progress: WorkoutProgress) -> List[Dict[str, Any]]:
    """Flatten completed and partial exercises into the persistence shape."""
    return [
        _result_entry(ex.planned, ex.actual_sets, ex.actual_reps, ex.weight)
        for ex in progress.completed + progress.partial
    ]


def prepare_completion_payload(
    planned: Sequence[PlannedExercise],
    completed_sets: Sequence[Sequence[float]],
    weights: Sequence[Sequence[float]],
) -> List[Dict[str, Any]]:
    """Results for every planned exercise, untouched ones included."""
    payload = []
    for index, exercise in enumerate(planned):
        exercise_sets = completed_sets[index] if index < len(completed_sets) else []
        exercise_weights = weights[index] if index < len(weights) else []
        reps, kept_weights = _attempted(exercise_sets, exercise_weights)
        payload.append(_result_entry(exercise, len(reps), reps, kept_weights))
    return payload


def format_duration(seconds: int) -> str:
    """Format seconds as ``1h 2m 3s`` (or ``2m 3s`` under an hour)."""
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def termination_summary(stats: PartialWorkoutStats) -> str:
    """Short message shown before a workout is ended early."""
    if stats.exercises_completed == 0:
        return (
            f"Workout ended with {stats.sets_completed} sets completed "
            f"across {stats.total_exercises} exercises"
        )
    return (
        f"{stats.exercises_completed} of {stats.total_exercises} exercises completed "
        f"({stats.completion_percentage}% of planned workout)"
    )
