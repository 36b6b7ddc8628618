from datetime import datetime, timedelta, timezone


def _planned(exercise, **overrides):
    data = {
        "exerciseId": exercise.id,
        "order": 1,
        "sets": 3,
        "reps": 10,
        "restBetweenSets": 60,
        "restAfter": 120,
    }
    data.update(overrides)
    return data


# ---- creating & reading ----

def test_create_session_with_exercises(client, push_ups, plank):
    response = client.post(
        "/sessions",
        json={
            "title": "Monday",
            "warmupSeconds": 300,
            "exercises": [
                _planned(plank, order=2, reps=None, durationSeconds=45),
                _planned(push_ups, order=1),
            ],
        },
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["title"] == "Monday"
    assert data["warmupSeconds"] == 300
    assert data["isTemplate"] is False
    assert data["completed"] is False
    assert [se["order"] for se in data["sessionExercises"]] == [1, 2]
    assert data["sessionExercises"][0]["exercise"]["name"] == "Push-ups"
    assert data["sessionExercises"][1]["durationSeconds"] == 45


def test_create_session_unknown_exercise(client):
    response = client.post(
        "/sessions",
        json={"title": "Ghost", "exercises": [{"exerciseId": 404, "order": 1, "sets": 1, "reps": 1, "restBetweenSets": 0, "restAfter": 0}]},
    )

    assert response.status_code == 400


def test_planned_exercise_needs_exactly_one_target(client, push_ups):
    response = client.post(
        "/sessions",
        json={"title": "Both", "exercises": [_planned(push_ups, durationSeconds=30)]},
    )

    assert response.status_code == 422


def test_get_session(client, push_ups, make_session):
    session = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 12}], warmup_seconds=120)

    response = client.get(f"/sessions/{session.id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == session.id
    assert data["warmupSeconds"] == 120
    assert data["sessionExercises"][0]["reps"] == 12


def test_get_unknown_session(client):
    assert client.get("/sessions/does-not-exist").status_code == 404


# ---- listing ----

def test_list_filters_and_search(client, push_ups, make_session):
    now = datetime.now(timezone.utc)
    planned = [{"exercise_id": push_ups.id, "sets": 3, "reps": 10}]
    make_session(planned, title="Old legs", date=now - timedelta(days=3), completed=True, duration=1800)
    make_session(planned, title="Upper body", date=now - timedelta(days=1))
    make_session(planned, title="Upper template", is_template=True)

    all_sessions = client.get("/sessions").json()["data"]
    completed = client.get("/sessions", params={"filter": "completed"}).json()["data"]
    templates = client.get("/sessions", params={"filter": "templates"}).json()["data"]
    searched = client.get("/sessions", params={"search": "upper"}).json()["data"]

    assert [s["title"] for s in all_sessions] == ["Upper body", "Old legs"]
    assert [s["title"] for s in completed] == ["Old legs"]
    assert [s["title"] for s in templates] == ["Upper template"]
    assert [s["title"] for s in searched] == ["Upper body"]


def test_list_rejects_unknown_filter(client):
    assert client.get("/sessions", params={"filter": "deleted"}).status_code == 422


# ---- updating ----

def test_update_session(client, push_ups, make_session):
    session = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}])

    response = client.put(f"/sessions/{session.id}", json={"title": "Evening", "warmupSeconds": 90})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Evening"
    assert data["warmupSeconds"] == 90


def test_update_session_rejects_empty_title(client, push_ups, make_session):
    session = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}])

    assert client.put(f"/sessions/{session.id}", json={"title": "  "}).status_code == 400


def test_rename_session(client, push_ups, make_session):
    session = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}])

    response = client.put(f"/sessions/{session.id}/rename", json={"title": "  Leg day  "})

    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Leg day"
    assert client.put(f"/sessions/{session.id}/rename", json={"title": ""}).status_code == 400


def test_delete_session(client, push_ups, make_session):
    session = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}])

    assert client.delete(f"/sessions/{session.id}").status_code == 200
    assert client.get(f"/sessions/{session.id}").status_code == 404
    # The library exercise is untouched
    assert client.get(f"/exercises/{push_ups.id}").status_code == 200


# ---- templates ----

def test_create_and_instantiate_template(client, push_ups, squats):
    created = client.post(
        "/sessions/templates",
        json={
            "title": "Full body",
            "warmupSeconds": 60,
            "exercises": [_planned(push_ups), _planned(squats, order=2, reps=15)],
        },
    )
    assert created.status_code == 201
    template = created.json()["data"]
    assert template["isTemplate"] is True

    listed = client.get("/sessions/templates").json()["data"]
    assert [t["id"] for t in listed] == [template["id"]]

    response = client.post(f"/sessions/templates/{template['id']}/instantiate", json={"title": "Full body #1"})

    assert response.status_code == 201
    session = response.json()["data"]
    assert session["id"] != template["id"]
    assert session["title"] == "Full body #1"
    assert session["isTemplate"] is False
    assert session["warmupSeconds"] == 60
    assert [se["exerciseId"] for se in session["sessionExercises"]] == [push_ups.id, squats.id]
    assert all(se["id"] not in {t["id"] for t in template["sessionExercises"]} for se in session["sessionExercises"])


def test_instantiate_without_body_keeps_title(client, push_ups, make_session):
    template = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}], title="Core", is_template=True)

    response = client.post(f"/sessions/templates/{template.id}/instantiate")

    assert response.status_code == 201
    assert response.json()["data"]["title"] == "Core"


def test_instantiate_rejects_regular_session(client, push_ups, make_session):
    session = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}])

    assert client.post(f"/sessions/templates/{session.id}/instantiate").status_code == 400


# ---- results ----

def test_complete_session(client, db, push_ups, squats, make_session):
    session = make_session(
        [
            {"exercise_id": push_ups.id, "sets": 2, "reps": 10},
            {"exercise_id": squats.id, "sets": 2, "reps": 15},
        ]
    )

    response = client.put(
        f"/sessions/{session.id}/complete",
        json={
            "duration": 1500,
            "exercises": [
                {"exerciseId": push_ups.id, "actualSets": 2, "actualReps": [10, 9], "weight": [0, 0]},
                {"exerciseId": squats.id, "actualSets": 2, "actualReps": [15, 15], "weight": [60, 60]},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["completed"] is True
    assert data["terminatedEarly"] is False
    assert data["duration"] == 1500
    assert data["sessionExercises"][0]["actualReps"] == [10, 9]
    assert data["sessionExercises"][1]["weight"] == [60, 60]


def test_terminate_session_keeps_untouched_rows_empty(client, push_ups, squats, make_session):
    session = make_session(
        [
            {"exercise_id": push_ups.id, "sets": 3, "reps": 10},
            {"exercise_id": squats.id, "sets": 3, "reps": 15},
        ]
    )

    response = client.put(
        f"/sessions/{session.id}/terminate",
        json={
            "actualDuration": 420,
            "completedExercises": [
                {"exerciseId": push_ups.id, "actualSets": 2, "actualReps": [10, 8], "weight": [0, 0]},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["completed"] is True
    assert data["terminatedEarly"] is True
    assert data["duration"] == 420
    assert data["sessionExercises"][0]["actualSets"] == 2
    assert data["sessionExercises"][1]["actualSets"] is None


def test_results_for_foreign_exercise_rejected(client, push_ups, squats, make_session):
    session = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}])

    response = client.put(
        f"/sessions/{session.id}/complete",
        json={"duration": 60, "exercises": [{"exerciseId": squats.id, "actualSets": 1, "actualReps": [5], "weight": [0]}]},
    )

    assert response.status_code == 400


def test_template_cannot_be_completed(client, push_ups, make_session):
    template = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}], is_template=True)

    response = client.put(f"/sessions/{template.id}/complete", json={"duration": 60, "exercises": []})

    assert response.status_code == 400


def test_update_single_exercise_results(client, push_ups, make_session):
    session = make_session([{"exercise_id": push_ups.id, "sets": 3, "reps": 10}])
    session_exercise_id = session.session_exercises[0].id

    response = client.put(
        f"/sessions/{session.id}/exercises",
        json={
            "exerciseId": push_ups.id,
            "sessionExerciseId": session_exercise_id,
            "actualSets": 3,
            "actualReps": [10, 10, 12],
            "weight": [5, 5, 5],
        },
    )

    assert response.status_code == 200
    row = response.json()["data"]["sessionExercises"][0]
    assert row["actualSets"] == 3
    assert row["actualReps"] == [10, 10, 12]
    assert row["weight"] == [5, 5, 5]
