# app/services/workout_execution.py
"""
Guided workout execution: the phase state machine behind the "execute
session" screen.

    WARMING_UP --(countdown zero | complete | skip)--> PERFORMING_SET
    PERFORMING_SET --(record set, more sets)--> RESTING (rest between sets)
    PERFORMING_SET --(record last set, more exercises)--> RESTING (rest after)
    PERFORMING_SET --(record last set of last exercise)--> COMPLETED
    RESTING --(countdown zero | skip)--> PERFORMING_SET
    PERFORMING_SET / RESTING --(terminate)--> TERMINATED

There is a single countdown at a time (warm-up or rest). It is advanced by an
external tick driver through ``tick()`` and is cancelled on every phase exit.
COMPLETED and TERMINATED are terminal.

Persistence is delegated to a recorder object exposing
``record_completion(session_id, duration, exercises)`` and
``record_termination(session_id, duration, exercises)``; both return an object
with ``success`` and ``message`` attributes (see ``app.db.db_access.DBResult``).
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from app.core.exceptions import EmptySessionError, InvalidTransitionError
from app.services.workout_analysis import (
    PartialWorkoutStats,
    PlannedExercise,
    WorkoutProgress,
    analyze_progress,
    compute_stats,
    has_completable_progress,
    prepare_completion_payload,
    prepare_termination_payload,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Phase(str, Enum):
    WARMING_UP = "warming_up"
    PERFORMING_SET = "performing_set"
    RESTING = "resting"
    COMPLETED = "completed"
    TERMINATED = "terminated"


TERMINAL_PHASES = (Phase.COMPLETED, Phase.TERMINATED)


@dataclass
class Countdown:
    remaining_seconds: int = 0
    active: bool = False

    def start(self, seconds: Optional[int] = None) -> None:
        if seconds is not None:
            self.remaining_seconds = max(0, int(seconds))
        self.active = True

    def tick(self, seconds: int = 1) -> bool:
        """Advance the countdown. Returns True only on the tick that reaches zero."""
        if not self.active:
            return False
        self.remaining_seconds = max(0, self.remaining_seconds - seconds)
        if self.remaining_seconds == 0:
            self.active = False
            return True
        return False

    def cancel(self) -> None:
        self.active = False
        self.remaining_seconds = 0


class HandoffStatus(str, Enum):
    PENDING = "pending"
    SAVED = "saved"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class Handoff:
    """What was (or should be) sent to the persistence layer when the
    workout ended."""

    kind: str                      # "completion" or "termination"
    duration: int
    exercises: List[Dict[str, Any]]
    status: HandoffStatus = HandoffStatus.PENDING
    message: str = ""
    attempts: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "duration": self.duration,
            "exercises": self.exercises,
            "status": self.status.value,
            "message": self.message,
            "attempts": self.attempts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Handoff":
        return cls(
            kind=data["kind"],
            duration=data["duration"],
            exercises=data["exercises"],
            status=HandoffStatus(data["status"]),
            message=data.get("message", ""),
            attempts=data.get("attempts", 0),
        )


@dataclass
class ExecutionState:
    session_id: str
    planned: List[PlannedExercise]
    warmup_seconds: int
    phase: Phase
    current_exercise_index: int = 0
    current_set_number: int = 1
    completed_sets: List[List[float]] = field(default_factory=list)
    weights: List[List[float]] = field(default_factory=list)
    session_start_time: Optional[datetime] = None
    countdown: Countdown = field(default_factory=Countdown)
    ended_at: Optional[datetime] = None
    total_duration: Optional[int] = None
    handoff: Optional[Handoff] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "planned": [p.to_dict() for p in self.planned],
            "warmup_seconds": self.warmup_seconds,
            "phase": self.phase.value,
            "current_exercise_index": self.current_exercise_index,
            "current_set_number": self.current_set_number,
            "completed_sets": self.completed_sets,
            "weights": self.weights,
            "session_start_time": self.session_start_time.isoformat() if self.session_start_time else None,
            "countdown": {
                "remaining_seconds": self.countdown.remaining_seconds,
                "active": self.countdown.active,
            },
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "total_duration": self.total_duration,
            "handoff": self.handoff.to_dict() if self.handoff else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionState":
        start = data.get("session_start_time")
        ended = data.get("ended_at")
        handoff = data.get("handoff")
        return cls(
            session_id=data["session_id"],
            planned=[PlannedExercise.from_dict(p) for p in data["planned"]],
            warmup_seconds=data["warmup_seconds"],
            phase=Phase(data["phase"]),
            current_exercise_index=data["current_exercise_index"],
            current_set_number=data["current_set_number"],
            completed_sets=data["completed_sets"],
            weights=data["weights"],
            session_start_time=datetime.fromisoformat(start) if start else None,
            countdown=Countdown(**data["countdown"]),
            ended_at=datetime.fromisoformat(ended) if ended else None,
            total_duration=data.get("total_duration"),
            handoff=Handoff.from_dict(handoff) if handoff else None,
        )


class WorkoutExecution:
    """Drives one session's ExecutionState through its phases."""

    def __init__(self, state: ExecutionState, clock: Clock = utc_now, recorder: Any = None):
        self.state = state
        self.clock = clock
        self.recorder = recorder

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def begin(
        cls,
        session_id: str,
        planned: Sequence[PlannedExercise],
        warmup_seconds: int = 0,
        clock: Clock = utc_now,
        recorder: Any = None,
    ) -> "WorkoutExecution":
        """Create the execution state for a session about to be performed."""
        if not planned:
            raise EmptySessionError(session_id)

        planned = sorted(planned, key=lambda p: p.order)
        warmup_seconds = max(0, int(warmup_seconds or 0))
        state = ExecutionState(
            session_id=session_id,
            planned=list(planned),
            warmup_seconds=warmup_seconds,
            phase=Phase.WARMING_UP if warmup_seconds > 0 else Phase.PERFORMING_SET,
            completed_sets=[[0] * p.sets for p in planned],
            weights=[[0] * p.sets for p in planned],
        )
        execution = cls(state, clock=clock, recorder=recorder)

        if state.phase == Phase.WARMING_UP:
            # Loaded but idle until the user starts the warm-up
            state.countdown = Countdown(remaining_seconds=warmup_seconds, active=False)
        else:
            state.session_start_time = clock()

        logger.info(
            f"Execution started for session {session_id}: "
            f"{len(planned)} exercises, warm-up {warmup_seconds}s"
        )
        return execution

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def current_exercise(self) -> Optional[PlannedExercise]:
        if self.state.phase not in (Phase.PERFORMING_SET, Phase.RESTING, Phase.TERMINATED, Phase.COMPLETED):
            return None
        index = self.state.current_exercise_index
        if 0 <= index < len(self.state.planned):
            return self.state.planned[index]
        return None

    def elapsed_seconds(self) -> int:
        if self.state.total_duration is not None:
            return self.state.total_duration
        if self.state.session_start_time is None:
            return 0
        delta = self.clock() - self.state.session_start_time
        return max(0, math.floor(delta.total_seconds()))

    def progress(self) -> WorkoutProgress:
        return analyze_progress(self.state.planned, self.state.completed_sets, self.state.weights)

    def stats(self) -> PartialWorkoutStats:
        return compute_stats(self.progress(), self.state.planned, self.elapsed_seconds())

    def overall_progress(self) -> int:
        """Display-only percentage for the progress bar."""
        state = self.state
        has_warmup = state.warmup_seconds > 0
        phases = 2 if has_warmup else 1

        if state.phase == Phase.COMPLETED:
            return 100

        if state.phase == Phase.WARMING_UP:
            elapsed = state.warmup_seconds - state.countdown.remaining_seconds
            warmup_progress = elapsed / state.warmup_seconds if has_warmup else 0
            return _round_half_up(warmup_progress / phases * 100)

        exercise = self.current_exercise
        if exercise is None:
            return 0
        exercise_progress = (
            state.current_exercise_index + (state.current_set_number - 1) / exercise.sets
        ) / len(state.planned)
        base = 0.5 if has_warmup else 0
        return _round_half_up((base + exercise_progress / phases) * 100)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def start_warmup(self) -> None:
        self._require(Phase.WARMING_UP, action="start the warm-up")
        if self.state.countdown.remaining_seconds == 0:
            self._begin_exercises()
            return
        self.state.countdown.start()

    def complete_warmup(self) -> None:
        self._require(Phase.WARMING_UP, action="complete the warm-up")
        self._begin_exercises()

    def skip_warmup(self) -> None:
        self._require(Phase.WARMING_UP, action="skip the warm-up")
        self._begin_exercises()

    def tick(self, seconds: int = 1) -> Optional[Phase]:
        """Advance the active countdown by ``seconds``.

        Returns the new phase when the tick fired a transition, else None.
        """
        if seconds < 0:
            raise ValueError("seconds cannot be negative")
        if not self.state.countdown.tick(seconds):
            return None

        if self.state.phase == Phase.WARMING_UP:
            self._begin_exercises()
        elif self.state.phase == Phase.RESTING:
            self._end_rest()
        return self.state.phase

    def record_set(self, value: float, weight: float = 0) -> Phase:
        """Record the set being performed and move on."""
        self._require(Phase.PERFORMING_SET, action="record a set")
        if not (math.isfinite(value) and math.isfinite(weight)):
            raise ValueError("Recorded values must be finite numbers")
        if value < 0 or weight < 0:
            raise ValueError("Recorded values cannot be negative")

        state = self.state
        exercise = state.planned[state.current_exercise_index]
        set_index = state.current_set_number - 1
        state.completed_sets[state.current_exercise_index][set_index] = value
        state.weights[state.current_exercise_index][set_index] = weight

        logger.debug(
            f"[{state.session_id}] exercise {state.current_exercise_index} "
            f"set {state.current_set_number}/{exercise.sets}: {value} @ {weight}"
        )

        if state.current_set_number < exercise.sets:
            state.current_set_number += 1
            self._rest(exercise.rest_between_sets)
        elif state.current_exercise_index < len(state.planned) - 1:
            state.current_exercise_index += 1
            state.current_set_number = 1
            self._rest(exercise.rest_after)
        else:
            self._complete()
        return state.phase

    def skip_rest(self) -> None:
        self._require(Phase.RESTING, action="skip the rest")
        self._end_rest()

    def terminate(self) -> WorkoutProgress:
        """End the workout early, saving whatever was recorded."""
        if self.state.phase not in (Phase.PERFORMING_SET, Phase.RESTING):
            raise InvalidTransitionError("end the workout", self.state.phase.value)

        progress = self.progress()
        duration = self._close(Phase.TERMINATED)

        if has_completable_progress(progress):
            self.state.handoff = Handoff(
                kind="termination",
                duration=duration,
                exercises=prepare_termination_payload(progress),
            )
            self._send_handoff()
        else:
            self.state.handoff = Handoff(
                kind="termination",
                duration=duration,
                exercises=[],
                status=HandoffStatus.SKIPPED,
                message="No completed sets, nothing to save",
            )
            logger.info(f"[{self.state.session_id}] terminated with no progress, discarded")
        return progress

    def retry_handoff(self) -> Handoff:
        """Send a failed (or never sent) completion/termination again."""
        handoff = self.state.handoff
        if handoff is None or handoff.status not in (HandoffStatus.FAILED, HandoffStatus.PENDING):
            raise InvalidTransitionError(
                "retry saving", self.state.phase.value, reason="nothing is waiting to be saved"
            )
        self._send_handoff()
        return handoff

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require(self, phase: Phase, action: str) -> None:
        if self.state.phase != phase:
            raise InvalidTransitionError(action, self.state.phase.value)

    def _enter(self, phase: Phase) -> None:
        # Tear down whatever countdown the previous phase owned
        self.state.countdown.cancel()
        self.state.phase = phase

    def _begin_exercises(self) -> None:
        self._enter(Phase.PERFORMING_SET)
        if self.state.session_start_time is None:
            self.state.session_start_time = self.clock()
        self.state.current_exercise_index = 0
        self.state.current_set_number = 1

    def _rest(self, seconds: int) -> None:
        if seconds <= 0:
            self._enter(Phase.PERFORMING_SET)
            return
        self._enter(Phase.RESTING)
        self.state.countdown.start(seconds)

    def _end_rest(self) -> None:
        self._enter(Phase.PERFORMING_SET)

    def _close(self, phase: Phase) -> int:
        duration = self.elapsed_seconds()
        self._enter(phase)
        self.state.ended_at = self.clock()
        self.state.total_duration = duration
        return duration

    def _complete(self) -> None:
        duration = self._close(Phase.COMPLETED)
        self.state.handoff = Handoff(
            kind="completion",
            duration=duration,
            exercises=prepare_completion_payload(
                self.state.planned, self.state.completed_sets, self.state.weights
            ),
        )
        logger.info(f"[{self.state.session_id}] workout completed in {duration}s")
        self._send_handoff()

    def _send_handoff(self) -> None:
        handoff = self.state.handoff
        if self.recorder is None:
            return

        handoff.attempts += 1
        if handoff.kind == "completion":
            send = self.recorder.record_completion
        else:
            send = self.recorder.record_termination

        try:
            result = send(self.state.session_id, handoff.duration, handoff.exercises)
        except Exception as e:
            logger.exception(f"[{self.state.session_id}] {handoff.kind} hand-off raised")
            handoff.status = HandoffStatus.FAILED
            handoff.message = str(e)
            return

        handoff.message = result.message
        if result.success:
            handoff.status = HandoffStatus.SAVED
        else:
            handoff.status = HandoffStatus.FAILED
            logger.warning(f"[{self.state.session_id}] {handoff.kind} not saved: {result.message}")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
