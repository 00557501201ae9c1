from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, EmailStr, Field, computed_field, field_validator, model_validator

from timetabler.schemas.grid import TIME_PATTERN, parse_time_to_minutes, validate_day_name

SUBJECT_CODE_PATTERN = re.compile(r"^[A-Za-z0-9]{2,6}$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Subject(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    code: str
    color: str = "#3b82f6"

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: str) -> str:
        code = value.strip()
        if not SUBJECT_CODE_PATTERN.match(code):
            raise ValueError("Code must be 2-6 characters (letters and numbers only)")
        return code.upper()


class Grade(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    level: int


class ClassSection(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    grade_id: str = Field(min_length=1, max_length=36)
    student_count: int = Field(ge=1, le=1000)


class Teacher(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    subjects: list[str] = Field(default_factory=list)
    weekly_hour_limit: float = Field(gt=0, le=168)


class RoomType(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    color: str = "#64748b"
    default_capacity: int = Field(default=30, ge=1, le=1000)
    features: list[str] = Field(default_factory=list)


class Classroom(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    code: str = ""
    room_type_id: str = Field(min_length=1, max_length=36)
    capacity: int = Field(ge=1, le=1000)
    building: str = ""
    floor: str = ""
    features: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    is_active: bool = True
    notes: str = ""


class SubjectRoomType(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    subject_id: str
    room_type_id: str
    # 1 = preferred, 2 = acceptable, 3 = last resort
    priority: int = Field(ge=1, le=3)
    is_required: bool = False


class GradeSubjectAllocation(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    grade_id: str
    subject_id: str
    weekly_hours: float = Field(ge=0, le=40)
    semester_weeks: int = Field(ge=1, le=52)

    @computed_field
    @property
    def total_hours(self) -> float:
        return self.weekly_hours * self.semester_weeks


class ClassSubjectTeacher(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    class_id: str
    subject_id: str
    teacher_id: str
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class TimeSlot(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    day: str
    period: int = Field(ge=1, le=16)
    start_time: str
    end_time: str

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return validate_day_name(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "TimeSlot":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class ReferenceData(BaseModel):
    """Read-only snapshot of everything the engine looks up while scheduling."""

    subjects: list[Subject] = Field(default_factory=list)
    grades: list[Grade] = Field(default_factory=list)
    class_sections: list[ClassSection] = Field(default_factory=list)
    teachers: list[Teacher] = Field(default_factory=list)
    room_types: list[RoomType] = Field(default_factory=list)
    classrooms: list[Classroom] = Field(default_factory=list)
    subject_room_types: list[SubjectRoomType] = Field(default_factory=list)
    time_slots: list[TimeSlot] = Field(default_factory=list)
    grade_subject_allocations: list[GradeSubjectAllocation] = Field(default_factory=list)
    teaching_assignments: list[ClassSubjectTeacher] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_keys(self) -> "ReferenceData":
        for label, rows in (
            ("subject", self.subjects),
            ("grade", self.grades),
            ("class section", self.class_sections),
            ("teacher", self.teachers),
            ("room type", self.room_types),
            ("classroom", self.classrooms),
            ("time slot id", self.time_slots),
            ("teaching assignment", self.teaching_assignments),
        ):
            _reject_duplicates(((row.id,) for row in rows), label)
        _reject_duplicates(
            ((row.subject_id, row.room_type_id) for row in self.subject_room_types),
            "subject room type",
        )
        _reject_duplicates(
            ((row.grade_id, row.subject_id) for row in self.grade_subject_allocations),
            "grade subject allocation",
        )
        _reject_duplicates(((slot.day, str(slot.period)) for slot in self.time_slots), "time slot")
        return self


def _reject_duplicates(keys, label: str) -> None:
    seen: set[tuple[str, ...]] = set()
    duplicates: list[str] = []
    for key in keys:
        if key in seen:
            duplicates.append("/".join(key))
        seen.add(key)
    if duplicates:
        raise ValueError(f"Duplicate {label} entries: {', '.join(sorted(set(duplicates)))}")
