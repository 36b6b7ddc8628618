from datetime import datetime, timedelta, timezone

import pytest

from app.services.analytics import calculate_progression_trends, get_date_from_range


def _days_ago(days):
    return datetime.now(timezone.utc) - timedelta(days=days)


@pytest.fixture
def history(push_ups, squats, plank, make_session):
    make_session(
        [
            {"exercise_id": push_ups.id, "sets": 2, "reps": 10, "actual_sets": 2, "actual_reps": [10, 10], "weight": [10, 10]},
            {"exercise_id": plank.id, "sets": 2, "duration_seconds": 30, "actual_sets": 2, "actual_reps": [30, 40], "weight": [0, 0]},
        ],
        title="Week 1",
        date=_days_ago(10),
        completed=True,
        duration=1800,
    )
    make_session(
        [
            {"exercise_id": push_ups.id, "sets": 2, "reps": 10, "actual_sets": 2, "actual_reps": [12, 12], "weight": [10, 10]},
        ],
        title="Week 2",
        date=_days_ago(2),
        completed=True,
        duration=2401,
    )
    make_session(
        [{"exercise_id": squats.id, "sets": 3, "reps": 15, "actual_sets": 3, "actual_reps": [15, 15, 15], "weight": [40, 40, 40]}],
        title="Way back",
        date=_days_ago(100),
        completed=True,
        duration=1200,
    )
    make_session(
        [{"exercise_id": squats.id, "sets": 3, "reps": 15}],
        title="Planned",
        date=_days_ago(1),
    )


def test_workout_duration(client, history):
    data = client.get("/analytics/workout-duration").json()["data"]

    assert data["range"] == "30d"
    assert [w["title"] for w in data["workouts"]] == ["Week 1", "Week 2"]
    assert data["totalWorkouts"] == 2
    assert data["averageDuration"] == 2101


def test_workout_duration_wider_range(client, history):
    data = client.get("/analytics/workout-duration", params={"range": "6m"}).json()["data"]

    assert [w["title"] for w in data["workouts"]] == ["Way back", "Week 1", "Week 2"]


def test_invalid_range(client):
    assert client.get("/analytics/workout-duration", params={"range": "2w"}).status_code == 400
    assert client.get("/analytics/exercises", params={"range": "forever"}).status_code == 400


def test_exercises_from_history(client, history, push_ups, squats, plank):
    data = client.get("/analytics/exercises").json()["data"]

    exercises = {e["name"]: e for e in data["exercises"]}
    assert set(exercises) == {"Push-ups", "Plank", "Squats"}
    assert exercises["Push-ups"]["totalSessions"] == 2
    assert data["exercises"][0]["name"] == "Push-ups"
    assert data["exercises"][-1]["name"] == "Squats"

    stats = data["stats"]
    assert stats["totalWorkouts"] == 2
    assert stats["period"] == 30
    assert stats["averagePerDay"] == 0.07
    assert stats["averagePerWeek"] == 0.47
    assert stats["totalExercisesUsed"] == 3
    assert stats["mostUsedExercise"]["name"] == "Push-ups"


def test_exercise_progression(client, history, push_ups):
    data = client.get(f"/analytics/exercise-progression/{push_ups.id}").json()["data"]

    assert data["totalSessions"] == 2
    first, last = data["progressions"]
    assert first["averageReps"] == 10
    assert first["totalVolume"] == 200
    assert last["averageReps"] == 12
    assert last["totalVolume"] == 240
    assert data["trends"] == {
        "repsChange": 2.0,
        "weightChange": 0,
        "volumeChange": 40,
        "repsPercentage": 20,
        "weightPercentage": 0,
        "volumePercentage": 20,
    }


def test_duration_based_progression(client, history, plank):
    data = client.get(f"/analytics/exercise-progression/{plank.id}").json()["data"]

    point = data["progressions"][0]
    assert point["isDurationBased"] is True
    assert point["averageDuration"] == 35
    assert point["averageReps"] == 0
    assert data["trends"]["repsChange"] == 0


def test_progression_unknown_exercise(client):
    assert client.get("/analytics/exercise-progression/999").status_code == 404


def test_trends_need_two_points():
    single = [{"averageReps": 10, "averageWeight": 20, "totalVolume": 400}]

    assert set(calculate_progression_trends(single).values()) == {0}


def test_get_date_from_range():
    now = datetime(2026, 6, 30, tzinfo=timezone.utc)

    assert get_date_from_range("3m", now) == now - timedelta(days=90)
    with pytest.raises(ValueError):
        get_date_from_range("10y", now)
