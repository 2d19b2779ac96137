from datetime import datetime, timedelta

import pytest

from core.database import DatabaseSaveError

HABIT = {"name": "Run", "category": "fitness", "frequency": "daily"}


def iso(dt):
    return dt.replace(microsecond=0).isoformat()


def create_habit(client, **overrides):
    response = client.post("/api/v1/habits", json={**HABIT, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def create_goal(client, days=30, **overrides):
    payload = {"title": "Marathon", "target_date": iso(datetime.now() + timedelta(days=days))}
    response = client.post("/api/v1/goals", json={**payload, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


# ==================== Service endpoints ====================

def test_root_lists_endpoints(client):
    body = client.get("/").json()

    assert body["message"] == "Habit Tracker API is running"
    assert "/api/v1/statistics" in body["endpoints"]


def test_health_reports_storage(client):
    create_habit(client)

    body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["storage"]["habits"] == 1


def test_unknown_endpoint(client):
    response = client.get("/api/v1/unknown")

    assert response.status_code == 404
    assert response.json() == {"error": "Endpoint not found"}


# ==================== Habits ====================

def test_habit_lifecycle(client):
    habit = create_habit(client)
    assert habit["id"] == 1
    assert habit["completed"] is False

    listed = client.get("/api/v1/habits").json()
    assert listed["count"] == 1
    assert listed["habits"][0]["name"] == "Run"

    response = client.put("/api/v1/habits/1", json={**HABIT, "name": "Swim"})
    assert response.status_code == 200
    assert response.json()["name"] == "Swim"
    assert response.json()["created_at"] == habit["created_at"]

    response = client.delete("/api/v1/habits/1")
    assert response.status_code == 204

    response = client.get("/api/v1/habits/1")
    assert response.status_code == 404
    assert response.json() == {"error": "Habit not found"}


def test_complete_habit_records_single_track(client):
    create_habit(client)

    response = client.put("/api/v1/habits/1/complete")
    assert response.status_code == 200
    assert response.json() == {"message": "Habit marked as completed", "id": 1}
    client.put("/api/v1/habits/1/complete")

    assert client.get("/api/v1/habits/1").json()["completed"] is True
    tracks = client.get("/api/v1/tracks").json()
    assert tracks["count"] == 1
    assert tracks["tracks"][0]["habit_id"] == 1
    assert tracks["tracks"][0]["completed"] is True


def test_update_keeps_completion_state(client):
    create_habit(client)
    client.put("/api/v1/habits/1/complete")

    response = client.put("/api/v1/habits/1", json={**HABIT, "description": "morning"})

    assert response.json()["completed"] is True
    assert response.json()["description"] == "morning"


@pytest.mark.parametrize("payload, message", [
    ({"category": "fitness", "frequency": "daily"}, "Habit name is required"),
    ({**HABIT, "name": ""}, "Habit name is required"),
    ({"name": "Run", "frequency": "daily"}, "Category is required"),
    ({"name": "Run", "category": "fitness"}, "Frequency is required"),
])
def test_create_habit_validation(client, payload, message):
    response = client.post("/api/v1/habits", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": message}
    assert client.get("/api/v1/habits").json()["count"] == 0


def test_whitespace_name_is_accepted(client):
    habit = create_habit(client, name="  ")

    assert habit["name"] == "  "


def test_invalid_json_body(client):
    response = client.post(
        "/api/v1/habits",
        content="{broken",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_invalid_path_identifier(client):
    response = client.get("/api/v1/habits/abc")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid habit ID"}


@pytest.mark.parametrize("method, path", [
    ("put", "/api/v1/habits/9"),
    ("delete", "/api/v1/habits/9"),
    ("put", "/api/v1/habits/9/complete"),
])
def test_missing_habit_is_not_found(client, method, path):
    kwargs = {"json": HABIT} if path == "/api/v1/habits/9" and method == "put" else {}

    response = getattr(client, method)(path, **kwargs)

    assert response.status_code == 404
    assert response.json() == {"error": "Habit not found"}


def test_storage_failure_maps_to_internal_error(client, storage, monkeypatch):
    def broken_create(habit):
        raise DatabaseSaveError("disk full")

    monkeypatch.setattr(storage, "create_habit", broken_create)

    response = client.post("/api/v1/habits", json=HABIT)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create habit"}


# ==================== Goals ====================

def test_goal_lifecycle(client):
    goal = create_goal(client, habit_ids=[1, 2])
    assert goal["id"] == 1
    assert goal["completed"] is False
    assert goal["completed_at"] is None
    assert goal["habit_ids"] == [1, 2]

    update = {"title": "Half marathon", "target_date": goal["target_date"]}
    response = client.put("/api/v1/goals/1", json=update)
    assert response.status_code == 200
    assert response.json()["title"] == "Half marathon"
    # habit_ids omitted on update keeps the existing list
    assert response.json()["habit_ids"] == [1, 2]

    response = client.put("/api/v1/goals/1/complete")
    assert response.json() == {"message": "Goal marked as completed", "id": 1}
    completed = client.get("/api/v1/goals/1").json()
    assert completed["completed"] is True
    assert completed["completed_at"] is not None

    assert client.delete("/api/v1/goals/1").status_code == 204
    assert client.get("/api/v1/goals/1").status_code == 404


@pytest.mark.parametrize("payload, message", [
    ({"target_date": "2030-01-01T00:00:00"}, "Goal title is required"),
    ({"title": "Marathon"}, "target_date is required"),
])
def test_create_goal_validation(client, payload, message):
    response = client.post("/api/v1/goals", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": message}


def test_complete_missing_goal(client):
    response = client.put("/api/v1/goals/3/complete")

    assert response.status_code == 404
    assert response.json() == {"error": "Goal not found"}


# ==================== Tracks ====================

def test_track_lifecycle(client):
    create_habit(client)
    payload = {"habit_id": 1, "date": iso(datetime.now()), "completed": True, "notes": "easy"}

    response = client.post("/api/v1/tracks", json=payload)
    assert response.status_code == 201
    track = response.json()
    assert track["id"] == 1
    assert track["notes"] == "easy"

    response = client.put("/api/v1/tracks/1", json={**payload, "completed": False})
    assert response.status_code == 200
    assert response.json()["completed"] is False

    assert client.delete("/api/v1/tracks/1").status_code == 204
    assert client.get("/api/v1/tracks/1").json() == {"error": "Track not found"}


def test_track_requires_existing_habit(client):
    payload = {"habit_id": 5, "date": iso(datetime.now())}

    response = client.post("/api/v1/tracks", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Habit not found"}


def test_track_requires_habit_id(client):
    response = client.post("/api/v1/tracks", json={"date": iso(datetime.now())})

    assert response.status_code == 400
    assert response.json() == {"error": "Habit ID is required"}


def test_update_missing_track(client):
    create_habit(client)
    payload = {"habit_id": 1, "date": iso(datetime.now())}

    response = client.put("/api/v1/tracks/4", json=payload)

    assert response.status_code == 404
    assert response.json() == {"error": "Track not found"}


# ==================== Statistics ====================

def test_statistics_empty(client):
    body = client.get("/api/v1/statistics").json()

    assert body["total_items"] == 0
    assert body["overall_progress"] == 0
    assert body["categories"] == {}


def test_statistics_scenario(client):
    create_habit(client)
    create_habit(client, name="Lift")
    create_habit(client, name="Read", category="mind")
    create_goal(client, days=-2)
    create_goal(client, days=10)
    client.put("/api/v1/habits/1/complete")
    client.put("/api/v1/goals/2/complete")

    body = client.get("/api/v1/statistics").json()

    assert body["total_habits"] == 3
    assert body["completed_habits"] == 1
    assert body["total_goals"] == 2
    assert body["completed_goals"] == 1
    assert body["overdue_goals"] == 1
    assert body["today_completed"] == 1
    assert body["total_items"] == 5
    assert body["completed_items"] == 2
    assert body["overall_progress"] == 40.0
    assert body["goal_completion_rate"] == 50.0
    assert body["categories"]["fitness"] == {"total": 2, "completed": 1, "percentage": 50.0}
    assert body["categories"]["mind"] == {"total": 1, "completed": 0, "percentage": 0.0}
