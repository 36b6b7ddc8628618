# db/models.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index, JSON, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
import uuid

def generate_uuid():
    return str(uuid.uuid4())

EXERCISE_CATEGORIES = ("FORCE", "CARDIO")

# Exercise library
class Exercise(Base):
    __tablename__ = 'exercises'

    id                        = Column(Integer, primary_key=True, index=True)
    name                      = Column(String(255), unique=True, nullable=False)
    category                  = Column(Enum(*EXERCISE_CATEGORIES, name="exercise_category"), nullable=False)
    muscle_groups             = Column(JSON, nullable=False, default=list)
    equipment_needed          = Column(String(255))
    instructions              = Column(Text)
    is_custom                 = Column(Boolean, default=True, nullable=False)
    is_duration_based         = Column(Boolean, default=False, nullable=False)
    default_sets              = Column(Integer, nullable=False)
    default_reps              = Column(Integer)
    default_duration          = Column(Integer)   # seconds, duration-based only
    default_rest_between_sets = Column(Integer, nullable=False)
    default_rest_after        = Column(Integer, nullable=False)
    created_at                = Column(DateTime(timezone=True), server_default=func.now())
    updated_at                = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    session_exercises = relationship("SessionExercise", back_populates="exercise")

# Workout sessions and templates
class WorkoutSession(Base):
    __tablename__ = 'sessions'

    id               = Column(String(36), primary_key=True, default=generate_uuid)
    title            = Column(String(255), nullable=False)
    date             = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    warmup_seconds   = Column(Integer, nullable=False, default=0)
    is_template      = Column(Boolean, nullable=False, default=False)
    duration         = Column(Integer)  # seconds, set once the workout ends
    completed        = Column(Boolean, nullable=False, default=False)
    terminated_early = Column(Boolean, nullable=False, default=False)
    created_at       = Column(DateTime(timezone=True), server_default=func.now())
    updated_at       = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    session_exercises = relationship(
        "SessionExercise",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionExercise.order",
    )

    # Indexes
    __table_args__ = (
        Index('idx_sessions_date', 'date'),
        Index('idx_sessions_is_template', 'is_template'),
    )

class SessionExercise(Base):
    __tablename__ = 'session_exercises'

    id                = Column(String(36), primary_key=True, default=generate_uuid)
    session_id        = Column(String(36), ForeignKey('sessions.id', ondelete='CASCADE'), nullable=False)
    exercise_id       = Column(Integer, ForeignKey('exercises.id', ondelete='RESTRICT'), nullable=False)
    order             = Column(Integer, nullable=False)
    sets              = Column(Integer, nullable=False)
    reps              = Column(Integer)
    duration_seconds  = Column(Integer)
    rest_between_sets = Column(Integer, nullable=False)
    rest_after        = Column(Integer, nullable=False)
    actual_sets       = Column(Integer)
    actual_reps       = Column(JSON)   # reps, or seconds for duration-based exercises
    weight            = Column(JSON)   # parallel to actual_reps

    # Relationships
    session  = relationship("WorkoutSession", back_populates="session_exercises")
    exercise = relationship("Exercise", back_populates="session_exercises")

    # Indexes
    __table_args__ = (
        Index('idx_session_exercises_session_id', 'session_id'),
        Index('idx_session_exercises_exercise_id', 'exercise_id'),
    )

# Progress photos
class Photo(Base):
    __tablename__ = 'photos'

    id            = Column(String(36), primary_key=True, default=generate_uuid)
    user_id       = Column(String(255))
    filename      = Column(String(255), unique=True, nullable=False)
    original_name = Column(String(255))
    capture_date  = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    notes         = Column(Text)
    file_size     = Column(Integer, nullable=False)
    mime_type     = Column(String(100), nullable=False)
    width         = Column(Integer)
    height        = Column(Integer)
    created_at    = Column(DateTime(timezone=True), server_default=func.now())
    updated_at    = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_photos_capture_date', 'capture_date'),
    )
