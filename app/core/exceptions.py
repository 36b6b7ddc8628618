# app/core/exceptions.py
"""Domain errors raised by the workout execution core.

Routes translate these into ``HTTPException`` responses; the core itself
never imports FastAPI.
"""
from typing import Optional


class WorkoutError(Exception):
    """Base class for workout execution errors."""


class EmptySessionError(WorkoutError):
    """The session has no planned exercises, so it cannot be executed."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} has no exercises to execute")


class InvalidTransitionError(WorkoutError):
    """A trigger was fired that the current phase does not accept."""

    def __init__(self, action: str, phase: str, reason: Optional[str] = None):
        self.action = action
        self.phase = phase
        message = f"Cannot {action} while {phase}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ExecutionNotFoundError(WorkoutError):
    """No live execution exists for the requested session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"No workout in progress for session {session_id}")


class ExecutionBusyError(WorkoutError):
    """Another request is already changing this session's execution."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Workout for session {session_id} is being updated, try again")
