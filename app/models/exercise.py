# app/models/exercise.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from app.models.common import CamelModel

ExerciseCategory = Literal["FORCE", "CARDIO"]


class ExerciseBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: ExerciseCategory
    muscle_groups: List[str] = Field(..., min_length=1)
    equipment_needed: Optional[str] = None
    instructions: Optional[str] = None
    is_duration_based: bool = False
    default_sets: int = Field(..., ge=1)
    default_reps: Optional[int] = Field(None, ge=1)
    default_duration: Optional[int] = Field(None, ge=1)
    default_rest_between_sets: int = Field(..., ge=0)
    default_rest_after: int = Field(..., ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @model_validator(mode="after")
    def check_target(self):
        # Duration-based exercises carry a hold time, the others a rep count
        if self.is_duration_based:
            if not self.default_duration:
                raise ValueError("Default duration is required for duration-based exercises")
            self.default_reps = None
        else:
            if not self.default_reps:
                raise ValueError("Default reps is required for rep-based exercises")
            self.default_duration = None
        return self


class ExerciseCreate(ExerciseBase):
    is_custom: bool = True


class ExerciseUpdate(ExerciseBase):
    pass


class Exercise(CamelModel):
    id: int
    name: str
    category: ExerciseCategory
    muscle_groups: List[str]
    equipment_needed: Optional[str] = None
    instructions: Optional[str] = None
    is_custom: bool
    is_duration_based: bool
    default_sets: int
    default_reps: Optional[int] = None
    default_duration: Optional[int] = None
    default_rest_between_sets: int
    default_rest_after: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
