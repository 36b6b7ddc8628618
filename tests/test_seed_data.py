from app.db.models import Exercise, WorkoutSession
from scripts.init_database import EXERCISES, TEMPLATES, init_exercises, init_templates


def test_seed_library_and_templates(db):
    init_exercises()
    init_templates()

    assert db.query(Exercise).count() == len(EXERCISES)
    templates = db.query(WorkoutSession).filter(WorkoutSession.is_template.is_(True)).all()
    assert sorted(t.title for t in templates) == sorted(t["title"] for t in TEMPLATES)
    assert all(t.session_exercises for t in templates)

    plank = db.query(Exercise).filter(Exercise.name == "Plank").one()
    assert plank.is_duration_based is True
    assert plank.default_reps is None


def test_seeding_twice_is_a_no_op(db):
    init_exercises()
    init_templates()
    init_exercises()
    init_templates()

    assert db.query(Exercise).count() == len(EXERCISES)
    assert db.query(WorkoutSession).count() == len(TEMPLATES)
