import pytest
from fastapi.testclient import TestClient

from timetabler.api.deps import clear_session_store
from timetabler.main import app
from timetabler.schemas.grid import GridConfig
from timetabler.schemas.reference import ReferenceData
from timetabler.services.session import create_session


@pytest.fixture()
def client():
    clear_session_store()
    with TestClient(app) as test_client:
        yield test_client
    clear_session_store()


@pytest.fixture
def reference_payload():
    return {
        "subjects": [
            {"id": "math", "name": "Mathematics", "code": "MATH", "color": "#3b82f6"},
            {"id": "eng", "name": "English", "code": "ENG", "color": "#10b981"},
            {"id": "sci", "name": "Science", "code": "SCI", "color": "#f59e0b"},
            {"id": "pe", "name": "Physical Education", "code": "PE", "color": "#ef4444"},
        ],
        "grades": [{"id": "g9", "name": "Grade 9", "level": 9}],
        "class_sections": [
            {"id": "9a", "name": "Grade 9A", "grade_id": "g9", "student_count": 30},
            {"id": "9b", "name": "Grade 9B", "grade_id": "g9", "student_count": 28},
        ],
        "teachers": [
            {
                "id": "t1",
                "name": "Dr. Sarah Johnson",
                "email": "sarah.johnson@school.edu",
                "subjects": ["math", "sci"],
                "weekly_hour_limit": 25,
            },
            {
                "id": "t2",
                "name": "Mr. David Chen",
                "email": "david.chen@school.edu",
                "subjects": ["eng"],
                "weekly_hour_limit": 30,
            },
            {
                "id": "t5",
                "name": "Coach Lisa Wilson",
                "email": "lisa.wilson@school.edu",
                "subjects": ["pe"],
                "weekly_hour_limit": 35,
            },
        ],
        "room_types": [
            {"id": "standard", "name": "Standard Classroom", "default_capacity": 35},
            {"id": "lab", "name": "Science Laboratory", "default_capacity": 30},
            {"id": "gym", "name": "Gymnasium", "default_capacity": 100},
        ],
        "classrooms": [
            {
                "id": "r101",
                "name": "Room 101",
                "code": "R101",
                "room_type_id": "standard",
                "capacity": 35,
                "features": ["Projector", "Whiteboard"],
            },
            {
                "id": "lab1",
                "name": "Science Lab 1",
                "code": "LAB1",
                "room_type_id": "lab",
                "capacity": 30,
                "features": ["Projector", "Whiteboard", "Fume Hood"],
            },
            {
                "id": "gym",
                "name": "Main Gymnasium",
                "code": "GYM",
                "room_type_id": "gym",
                "capacity": 100,
                "features": ["Sound System"],
            },
        ],
        "subject_room_types": [
            {"subject_id": "math", "room_type_id": "standard", "priority": 1, "is_required": False},
            {"subject_id": "sci", "room_type_id": "lab", "priority": 1, "is_required": True},
            {"subject_id": "pe", "room_type_id": "gym", "priority": 1, "is_required": True},
        ],
        "grade_subject_allocations": [
            {"grade_id": "g9", "subject_id": "math", "weekly_hours": 5, "semester_weeks": 18},
            {"grade_id": "g9", "subject_id": "eng", "weekly_hours": 4, "semester_weeks": 18},
            {"grade_id": "g9", "subject_id": "sci", "weekly_hours": 3, "semester_weeks": 18},
            {"grade_id": "g9", "subject_id": "pe", "weekly_hours": 1.5, "semester_weeks": 18},
        ],
        "teaching_assignments": [
            {"id": "a1", "class_id": "9a", "subject_id": "math", "teacher_id": "t1"},
            {"id": "a2", "class_id": "9a", "subject_id": "eng", "teacher_id": "t2"},
            {"id": "a3", "class_id": "9a", "subject_id": "pe", "teacher_id": "t5"},
            {"id": "a4", "class_id": "9b", "subject_id": "math", "teacher_id": "t1"},
        ],
    }


@pytest.fixture
def reference(reference_payload):
    return ReferenceData.model_validate(reference_payload)


@pytest.fixture
def grid():
    return GridConfig(
        days=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
        periods_per_day=8,
        period_minutes=45,
    )


@pytest.fixture
def session(reference, grid):
    return create_session(reference, grid)
