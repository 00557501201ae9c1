from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class TeacherDoubleBookingConflict(BaseModel):
    type: Literal["teacher_double_booking"] = "teacher_double_booking"
    severity: Literal["error"] = "error"
    message: str
    teacher_id: str
    day: str
    period: int
    affected_entries: list[str]


class TeacherOverloadConflict(BaseModel):
    type: Literal["teacher_overload"] = "teacher_overload"
    severity: Literal["warning"] = "warning"
    message: str
    teacher_id: str
    scheduled_hours: float
    weekly_hour_limit: float
    affected_entries: list[str]


class RoomClashConflict(BaseModel):
    type: Literal["room_clash"] = "room_clash"
    severity: Literal["error"] = "error"
    message: str
    room_id: str
    day: str
    period: int
    affected_entries: list[str]


ScheduleConflict = Annotated[
    Union[TeacherDoubleBookingConflict, TeacherOverloadConflict, RoomClashConflict],
    Field(discriminator="type"),
]


class MissingRoomTypeConflict(BaseModel):
    type: Literal["missing_room_type"] = "missing_room_type"
    severity: Literal["error"] = "error"
    message: str
    room_type_id: str
    affected_ids: list[str]
    suggestions: list[str] = Field(default_factory=list)


class DuplicateKeyConflict(BaseModel):
    type: Literal["duplicate_key"] = "duplicate_key"
    severity: Literal["error"] = "error"
    message: str
    entity: Literal["classroom", "subject", "teacher"]
    field: Literal["name", "code", "email"]
    value: str
    affected_ids: list[str]
    suggestions: list[str] = Field(default_factory=list)


class InvalidSubjectReferenceConflict(BaseModel):
    type: Literal["invalid_subject_reference"] = "invalid_subject_reference"
    severity: Literal["error"] = "error"
    message: str
    subject_ids: list[str]
    affected_ids: list[str]
    suggestions: list[str] = Field(default_factory=list)


class TeacherWithoutSubjectsConflict(BaseModel):
    type: Literal["teacher_without_subjects"] = "teacher_without_subjects"
    severity: Literal["warning"] = "warning"
    message: str
    affected_ids: list[str]
    suggestions: list[str] = Field(default_factory=list)


class UncoveredSubjectConflict(BaseModel):
    type: Literal["uncovered_subject"] = "uncovered_subject"
    severity: Literal["error"] = "error"
    message: str
    affected_ids: list[str]
    suggestions: list[str] = Field(default_factory=list)


IntegrityConflict = Annotated[
    Union[
        MissingRoomTypeConflict,
        DuplicateKeyConflict,
        InvalidSubjectReferenceConflict,
        TeacherWithoutSubjectsConflict,
        UncoveredSubjectConflict,
    ],
    Field(discriminator="type"),
]


class TeacherSubjectMismatchConflict(BaseModel):
    type: Literal["teacher_subject_mismatch"] = "teacher_subject_mismatch"
    severity: Literal["error"] = "error"
    message: str
    affected_assignments: list[str]
    suggestions: list[str] = Field(default_factory=list)


class TeacherOvercommittedConflict(BaseModel):
    type: Literal["teacher_overcommitted"] = "teacher_overcommitted"
    severity: Literal["warning"] = "warning"
    message: str
    teacher_id: str
    affected_assignments: list[str]
    suggestions: list[str] = Field(default_factory=list)


class ClassSubjectDuplicateConflict(BaseModel):
    type: Literal["class_subject_duplicate"] = "class_subject_duplicate"
    severity: Literal["error"] = "error"
    message: str
    affected_assignments: list[str]
    suggestions: list[str] = Field(default_factory=list)


AssignmentConflict = Annotated[
    Union[TeacherSubjectMismatchConflict, TeacherOvercommittedConflict, ClassSubjectDuplicateConflict],
    Field(discriminator="type"),
]
