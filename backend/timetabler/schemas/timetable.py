from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from timetabler.models.timetable import ViewMode
from timetabler.schemas.grid import validate_day_name


class TimetableEntry(BaseModel):
    id: str
    class_id: str | None = None
    teacher_id: str
    subject_id: str
    room_id: str | None = None
    time_slot_id: str
    day: str
    period: int


class SubjectProgress(BaseModel):
    scheduled: float
    total: float
    percentage: int


class SlotOut(BaseModel):
    day: str
    period: int


class EntryCreate(BaseModel):
    day: str
    period: int = Field(ge=1)
    subject_id: str = Field(min_length=1)
    entity_id: str = Field(min_length=1)
    view_mode: ViewMode = ViewMode.class_
    class_id: str | None = None

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return validate_day_name(value)
