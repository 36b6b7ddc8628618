# scripts/init_database.py

import logging
from app.core.database import SessionLocal
from app.db.models import Exercise, SessionExercise, WorkoutSession

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


EXERCISES = [
    # ————————————————
    # STRENGTH
    # ————————————————
    {
        "name": "Push-ups",
        "category": "FORCE",
        "muscle_groups": ["chest", "shoulders", "triceps"],
        "default_sets": 3,
        "default_reps": 12,
        "default_rest_between_sets": 60,
        "default_rest_after": 120,
    },
    {
        "name": "Wall push-ups",
        "category": "FORCE",
        "muscle_groups": ["chest", "triceps"],
        "default_sets": 3,
        "default_reps": 15,
        "default_rest_between_sets": 45,
        "default_rest_after": 90,
    },
    {
        "name": "Squats",
        "category": "FORCE",
        "muscle_groups": ["quadriceps", "glutes"],
        "default_sets": 3,
        "default_reps": 15,
        "default_rest_between_sets": 60,
        "default_rest_after": 120,
    },
    {
        "name": "Pull-ups",
        "category": "FORCE",
        "muscle_groups": ["back", "biceps"],
        "default_sets": 3,
        "default_reps": 8,
        "default_rest_between_sets": 90,
        "default_rest_after": 120,
    },
    {
        "name": "Crunches",
        "category": "FORCE",
        "muscle_groups": ["abs"],
        "default_sets": 3,
        "default_reps": 20,
        "default_rest_between_sets": 45,
        "default_rest_after": 90,
    },

    # ————————————————
    # HOLDS
    # ————————————————
    {
        "name": "Plank",
        "category": "FORCE",
        "muscle_groups": ["abs"],
        "is_duration_based": True,
        "default_sets": 3,
        "default_duration": 30,
        "default_rest_between_sets": 60,
        "default_rest_after": 120,
    },
]

# Planned exercises reference the library by name
TEMPLATES = [
    {
        "title": "Upper body strength",
        "warmup_seconds": 300,
        "exercises": [
            {"name": "Push-ups", "sets": 3, "reps": 12, "rest_between_sets": 60, "rest_after": 120},
            {"name": "Pull-ups", "sets": 3, "reps": 8, "rest_between_sets": 90, "rest_after": 120},
            {"name": "Wall push-ups", "sets": 3, "reps": 15, "rest_between_sets": 45, "rest_after": 90},
        ],
    },
    {
        "title": "Lower body power",
        "warmup_seconds": 300,
        "exercises": [
            {"name": "Squats", "sets": 3, "reps": 15, "rest_between_sets": 60, "rest_after": 120},
            {"name": "Crunches", "sets": 3, "reps": 20, "rest_between_sets": 45, "rest_after": 90},
        ],
    },
    {
        "title": "Core blast",
        "warmup_seconds": 180,
        "exercises": [
            {"name": "Plank", "sets": 3, "duration_seconds": 30, "rest_between_sets": 60, "rest_after": 120},
            {"name": "Crunches", "sets": 3, "reps": 20, "rest_between_sets": 45, "rest_after": 90},
        ],
    },
]


def init_exercises():
    """Initialize the exercise library."""
    db = SessionLocal()
    try:
        # If there is already at least one exercise in the table, skip initialization
        if db.query(Exercise).count() > 0:
            logger.info("Exercises already initialized, skipping.")
            return

        for data in EXERCISES:
            db.add(Exercise(is_custom=False, **data))

        db.commit()
        logger.info(f"Initialized {len(EXERCISES)} exercises.")

    except Exception as e:
        db.rollback()
        logger.error(f"Error initializing exercises: {e}")
        raise
    finally:
        db.close()


def init_templates():
    """Initialize the starter session templates (needs the exercise library)."""
    db = SessionLocal()
    try:
        if db.query(WorkoutSession).filter(WorkoutSession.is_template.is_(True)).count() > 0:
            logger.info("Templates already initialized, skipping.")
            return

        exercise_ids = {name: id_ for id_, name in db.query(Exercise.id, Exercise.name).all()}

        for tpl in TEMPLATES:
            template = WorkoutSession(
                title=tpl["title"],
                warmup_seconds=tpl["warmup_seconds"],
                is_template=True,
            )
            for order, ex in enumerate(tpl["exercises"], start=1):
                if ex["name"] not in exercise_ids:
                    raise RuntimeError(f"Template '{tpl['title']}' needs missing exercise '{ex['name']}'")
                template.session_exercises.append(
                    SessionExercise(
                        exercise_id=exercise_ids[ex["name"]],
                        order=order,
                        sets=ex["sets"],
                        reps=ex.get("reps"),
                        duration_seconds=ex.get("duration_seconds"),
                        rest_between_sets=ex["rest_between_sets"],
                        rest_after=ex["rest_after"],
                    )
                )
            db.add(template)

        db.commit()
        logger.info(f"Initialized {len(TEMPLATES)} session templates.")

    except Exception as e:
        db.rollback()
        logger.error(f"Error initializing templates: {e}")
        raise
    finally:
        db.close()


def main():
    """Entry point: initialize exercises, then templates."""
    logger.info("🔧 Starting database initialization...")
    init_exercises()
    init_templates()
    logger.info("✅ Database initialization complete!")


if __name__ == "__main__":
    main()
