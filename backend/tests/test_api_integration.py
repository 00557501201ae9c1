from fastapi import FastAPI
from fastapi.testclient import TestClient

from timetabler.core.middleware import RequestSizeLimitMiddleware


def create_session(client, reference_payload, **extra):
    response = client.post("/api/sessions", json={"reference": reference_payload, **extra})
    assert response.status_code == 201
    return response.json()


def add_entry(client, session_id, **payload):
    return client.post(f"/api/sessions/{session_id}/entries", json=payload)


def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"


def test_session_lifecycle(client, reference_payload):
    created = create_session(client, reference_payload)
    session_id = created["id"]

    assert created["grid"]["periods_per_day"] == 8
    assert created["entry_count"] == 0
    assert created["publishable"] is True

    assert client.get(f"/api/sessions/{session_id}").json()["id"] == session_id
    assert client.delete(f"/api/sessions/{session_id}").status_code == 204

    missing = client.get(f"/api/sessions/{session_id}")
    assert missing.status_code == 404
    assert missing.json()["details"]["resource_type"] == "SchedulingSession"


def test_invalid_snapshot_is_rejected(client, reference_payload):
    reference_payload["subject_room_types"].append(
        {"subject_id": "math", "room_type_id": "standard", "priority": 2}
    )
    response = client.post("/api/sessions", json={"reference": reference_payload})
    assert response.status_code == 422


def test_place_lessons_and_assign_rooms(client, reference_payload):
    session_id = create_session(client, reference_payload)["id"]

    response = add_entry(client, session_id, day="Monday", period=1, subject_id="pe", entity_id="9a")
    assert response.status_code == 201
    entry = response.json()
    assert entry["teacher_id"] == "t5"

    progress = client.get(f"/api/sessions/{session_id}/progress", params={"entity_id": "9a"}).json()
    assert progress["pe"] == {"scheduled": 0.75, "total": 1.5, "percentage": 50}

    suggestions = client.get(f"/api/sessions/{session_id}/entries/{entry['id']}/room-suggestions").json()
    assert suggestions[0]["room_id"] == "gym"
    assert suggestions[0]["suitability_score"] == 115

    assigned = client.post(f"/api/sessions/{session_id}/rooms/auto-assign").json()
    assert [row["room_id"] for row in assigned] == ["gym"]

    utilization = client.get(f"/api/sessions/{session_id}/room-utilization").json()
    gym = next(row for row in utilization if row["room_id"] == "gym")
    assert gym["occupied_slots"] == 1
    assert gym["utilization_percentage"] == 3
    assert gym["peak_hours"] == ["Monday-1"]

    entries = client.get(f"/api/sessions/{session_id}/entries").json()
    assert entries[0]["room_id"] == "gym"


def test_placement_errors(client, reference_payload):
    session_id = create_session(client, reference_payload)["id"]

    no_teacher = add_entry(client, session_id, day="Monday", period=1, subject_id="sci", entity_id="9a")
    assert no_teacher.status_code == 409
    assert no_teacher.json()["details"]["code"] == "NoTeacherAssigned"

    outside = add_entry(client, session_id, day="Monday", period=12, subject_id="math", entity_id="9a")
    assert outside.status_code == 400

    bad_day = add_entry(client, session_id, day="Someday", period=1, subject_id="math", entity_id="9a")
    assert bad_day.status_code == 422

    unknown_class = add_entry(client, session_id, day="Monday", period=1, subject_id="math", entity_id="9z")
    assert unknown_class.status_code == 404


def test_room_occupied_conflict(client, reference_payload):
    session_id = create_session(client, reference_payload)["id"]
    first = add_entry(client, session_id, day="Monday", period=1, subject_id="math", entity_id="9a").json()
    second = add_entry(client, session_id, day="Monday", period=1, subject_id="eng", entity_id="9b")
    # 9b has no English teacher
    assert second.status_code == 409

    client.post(
        f"/api/sessions/{session_id}/teaching-assignments",
        json={"class_id": "9b", "subject_id": "eng", "teacher_id": "t2"},
    )
    second = add_entry(client, session_id, day="Monday", period=1, subject_id="eng", entity_id="9b").json()

    ok = client.put(f"/api/sessions/{session_id}/entries/{first['id']}/room", json={"room_id": "r101"})
    assert ok.status_code == 200
    assert ok.json()["id"] == f"manual-{first['id']}"

    clash = client.put(f"/api/sessions/{session_id}/entries/{second['id']}/room", json={"room_id": "r101"})
    assert clash.status_code == 409
    assert clash.json()["details"]["occupying_entry_id"] == first["id"]

    assert client.get(f"/api/sessions/{session_id}/room-conflicts").json() == []
    assert client.delete(f"/api/sessions/{session_id}/entries/{first['id']}/room").status_code == 204
    assert client.get(f"/api/sessions/{session_id}/room-assignments").json() == []


def test_double_booking_is_reported(client, reference_payload):
    session_id = create_session(client, reference_payload)["id"]
    add_entry(client, session_id, day="Tuesday", period=3, subject_id="math", entity_id="9a")
    add_entry(client, session_id, day="Tuesday", period=3, subject_id="math", entity_id="9b")

    conflicts = client.get(f"/api/sessions/{session_id}/conflicts").json()
    assert [c["type"] for c in conflicts] == ["teacher_double_booking"]
    assert client.get(f"/api/sessions/{session_id}").json()["publishable"] is False

    assert client.delete(f"/api/sessions/{session_id}/entries").status_code == 204
    assert client.get(f"/api/sessions/{session_id}/conflicts").json() == []


def test_teacher_mode_and_valid_slots(client, reference_payload):
    session_id = create_session(client, reference_payload)["id"]
    response = add_entry(
        client,
        session_id,
        day="Wednesday",
        period=2,
        subject_id="math",
        entity_id="t1",
        view_mode="teacher",
    )
    assert response.status_code == 201
    assert response.json()["class_id"] == "9a"

    slots = client.get(
        f"/api/sessions/{session_id}/valid-slots",
        params={"subject_id": "math", "entity_id": "t1", "view_mode": "teacher"},
    ).json()
    assert len(slots) == 39
    assert {"day": "Wednesday", "period": 2} not in slots


def test_teaching_workload_and_integrity(client, reference_payload):
    session_id = create_session(client, reference_payload)["id"]

    response = client.post(
        f"/api/sessions/{session_id}/teaching-assignments",
        json={"class_id": "9b", "subject_id": "sci", "teacher_id": "t2"},
    )
    assert response.status_code == 201
    assignment_id = response.json()["id"]

    conflicts = client.get(f"/api/sessions/{session_id}/assignment-conflicts").json()
    assert [c["type"] for c in conflicts] == ["teacher_subject_mismatch"]

    removed = client.delete(f"/api/sessions/{session_id}/teaching-assignments/{assignment_id}")
    assert removed.json()["is_active"] is False
    assert client.get(f"/api/sessions/{session_id}/assignment-conflicts").json() == []

    updated = client.put(
        f"/api/sessions/{session_id}/allocations",
        json={"grade_id": "g9", "subject_id": "math", "weekly_hours": 6},
    ).json()
    assert updated["total_hours"] == 108

    workload = {row["teacher_id"]: row for row in client.get(f"/api/sessions/{session_id}/workload").json()}
    assert workload["t1"]["total_weekly_hours"] == 12

    assert client.get(f"/api/sessions/{session_id}/integrity").json() == []


def test_unknown_ids_in_teaching_assignment(client, reference_payload):
    session_id = create_session(client, reference_payload)["id"]
    response = client.post(
        f"/api/sessions/{session_id}/teaching-assignments",
        json={"class_id": "9a", "subject_id": "math", "teacher_id": "nobody"},
    )
    assert response.status_code == 404
    assert response.json()["details"]["resource_type"] == "Teacher"


def test_oversized_body_is_refused():
    small_app = FastAPI()
    small_app.add_middleware(RequestSizeLimitMiddleware, max_bytes=16)

    @small_app.post("/echo")
    def echo(payload: dict) -> dict:
        return payload

    with TestClient(small_app) as small_client:
        assert small_client.post("/echo", json={"a": 1}).status_code == 200
        response = small_client.post("/echo", json={"reference": "x" * 64})

    assert response.status_code == 413
    assert response.json()["details"]["max_bytes"] == 16


def test_snapshot_with_duplicate_room_ids_is_rejected(client, reference_payload):
    reference_payload["classrooms"].append(
        {"id": "r101", "name": "Room 101 B", "code": "R101", "room_type_id": "standard", "capacity": 30}
    )
    response = client.post("/api/sessions", json={"reference": reference_payload})
    assert response.status_code == 422


def test_too_many_periods_is_a_client_error(client, reference_payload):
    reference_payload["time_slots"] = [
        {
            "id": str(period),
            "day": "Monday",
            "period": period,
            "start_time": f"{6 + (period - 1) // 2:02d}:{30 * ((period - 1) % 2):02d}",
            "end_time": f"{6 + period // 2:02d}:{30 * (period % 2):02d}",
        }
        for period in range(1, 19)
    ]
    response = client.post("/api/sessions", json={"reference": reference_payload})
    assert response.status_code == 422


def test_grid_without_time_slots_is_a_client_error(client, reference_payload):
    reference_payload["time_slots"] = [
        {"id": "1", "day": "Monday", "period": 1, "start_time": "08:00", "end_time": "08:45"},
    ]
    response = client.post(
        "/api/sessions",
        json={
            "reference": reference_payload,
            "grid": {"days": ["Monday"], "periods_per_day": 2, "period_minutes": 45},
        },
    )
    assert response.status_code == 422
    assert response.json()["details"]["missing_cells"] == ["Monday/2"]
