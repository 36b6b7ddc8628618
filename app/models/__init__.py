# models/__init__.py
"""
Pydantic models for request/response validation
"""

from .common import CamelModel, BaseResponse, DataResponse

from .exercise import (
    ExerciseCategory,
    ExerciseBase,
    ExerciseCreate,
    ExerciseUpdate,
    Exercise
)

from .session import (
    SessionExerciseCreate,
    SessionExercise,
    SessionCreate,
    SessionUpdate,
    SessionRename,
    Session,
    ExerciseResult,
    SessionExerciseResultUpdate,
    CompleteSessionRequest,
    TerminateSessionRequest,
    InstantiateTemplateRequest
)

from .execution import (
    TickRequest,
    RecordSetRequest,
    ExecutionSnapshot
)

from .photo import Photo, PhotoUpdate

__all__ = [
    # Common
    "CamelModel",
    "BaseResponse",
    "DataResponse",

    # Exercise
    "ExerciseCategory",
    "ExerciseBase",
    "ExerciseCreate",
    "ExerciseUpdate",
    "Exercise",

    # Session
    "SessionExerciseCreate",
    "SessionExercise",
    "SessionCreate",
    "SessionUpdate",
    "SessionRename",
    "Session",
    "ExerciseResult",
    "SessionExerciseResultUpdate",
    "CompleteSessionRequest",
    "TerminateSessionRequest",
    "InstantiateTemplateRequest",

    # Execution
    "TickRequest",
    "RecordSetRequest",
    "ExecutionSnapshot",

    # Photo
    "Photo",
    "PhotoUpdate"
]
