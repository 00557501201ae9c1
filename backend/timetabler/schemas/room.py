from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from timetabler.models.timetable import ConflictStatus


class RoomSuggestion(BaseModel):
    room_id: str
    room_name: str
    suitability_score: int = Field(ge=0)
    reasons: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class RoomAssignment(BaseModel):
    id: str
    timetable_entry_id: str
    room_id: str
    is_auto_assigned: bool
    assigned_at: datetime
    # "system" or the assigning user
    assigned_by: str
    conflict_status: ConflictStatus = ConflictStatus.none


class RoomAssignmentRequest(BaseModel):
    room_id: str = Field(min_length=1)
    assigned_by: str = Field(default="user", min_length=1, max_length=100)


class RoomConflictResolution(BaseModel):
    type: Literal["move_to_room", "swap_rooms", "change_time", "split_class"]
    description: str
    room_id: str | None = None
    alternative_time_slot: str | None = None
    impact: Literal["low", "medium", "high"]


class RoomConflict(BaseModel):
    id: str
    type: Literal["room_double_booking"] = "room_double_booking"
    room_id: str
    time_slot_id: str
    day: str
    period: int
    conflicting_entries: list[str]
    severity: Literal["warning", "error"] = "error"
    message: str
    suggested_resolutions: list[RoomConflictResolution] = Field(default_factory=list)


class RoomUtilizationAssignment(BaseModel):
    day: str
    period: int
    subject: str
    class_name: str
    teacher: str


class RoomUtilization(BaseModel):
    room_id: str
    room_name: str
    room_type: str
    total_slots: int
    occupied_slots: int
    utilization_percentage: int
    peak_hours: list[str]
    conflicts: int
    assignments: list[RoomUtilizationAssignment] = Field(default_factory=list)
