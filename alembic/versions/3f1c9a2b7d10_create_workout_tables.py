"""create exercises, sessions, session_exercises & photos

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-19 10:12:03.118204
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "3f1c9a2b7d10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ---- exercises ----
    op.create_table(
        "exercises",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.Enum("FORCE", "CARDIO", name="exercise_category"), nullable=False),
        sa.Column("muscle_groups", sa.JSON(), nullable=False),
        sa.Column("equipment_needed", sa.String(length=255), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("is_custom", sa.Boolean(), nullable=False),
        sa.Column("is_duration_based", sa.Boolean(), nullable=False),
        sa.Column("default_sets", sa.Integer(), nullable=False),
        sa.Column("default_reps", sa.Integer(), nullable=True),
        sa.Column("default_duration", sa.Integer(), nullable=True),
        sa.Column("default_rest_between_sets", sa.Integer(), nullable=False),
        sa.Column("default_rest_after", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_exercises_id"), "exercises", ["id"], unique=False)

    # ---- sessions ----
    op.create_table(
        "sessions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("warmup_seconds", sa.Integer(), nullable=False),
        sa.Column("is_template", sa.Boolean(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("terminated_early", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_sessions_date", "sessions", ["date"], unique=False)
    op.create_index("idx_sessions_is_template", "sessions", ["is_template"], unique=False)

    # ---- session_exercises ----
    op.create_table(
        "session_exercises",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("session_id", sa.String(length=36), nullable=False),
        # exercises.id is INTEGER
        sa.Column("exercise_id", sa.Integer(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("sets", sa.Integer(), nullable=False),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("rest_between_sets", sa.Integer(), nullable=False),
        sa.Column("rest_after", sa.Integer(), nullable=False),
        sa.Column("actual_sets", sa.Integer(), nullable=True),
        sa.Column("actual_reps", sa.JSON(), nullable=True),
        sa.Column("weight", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["session_id"], ["sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_session_exercises_session_id", "session_exercises", ["session_id"], unique=False)
    op.create_index("idx_session_exercises_exercise_id", "session_exercises", ["exercise_id"], unique=False)

    # ---- photos ----
    op.create_table(
        "photos",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=True),
        sa.Column("capture_date", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("filename"),
    )
    op.create_index("idx_photos_capture_date", "photos", ["capture_date"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_photos_capture_date", table_name="photos")
    op.drop_table("photos")

    op.drop_index("idx_session_exercises_exercise_id", table_name="session_exercises")
    op.drop_index("idx_session_exercises_session_id", table_name="session_exercises")
    op.drop_table("session_exercises")

    op.drop_index("idx_sessions_is_template", table_name="sessions")
    op.drop_index("idx_sessions_date", table_name="sessions")
    op.drop_table("sessions")

    op.drop_index(op.f("ix_exercises_id"), table_name="exercises")
    op.drop_table("exercises")
    sa.Enum(name="exercise_category").drop(op.get_bind(), checkfirst=True)
