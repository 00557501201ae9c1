from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping

from timetabler.schemas.conflict import (
    RoomClashConflict,
    ScheduleConflict,
    TeacherDoubleBookingConflict,
    TeacherOverloadConflict,
)
from timetabler.schemas.reference import Classroom, Teacher
from timetabler.schemas.room import RoomAssignment, RoomConflict, RoomConflictResolution
from timetabler.schemas.timetable import TimetableEntry


def validate_constraints(
    entries: Iterable[TimetableEntry],
    teachers: Mapping[str, Teacher],
    rooms: Mapping[str, Classroom],
    period_minutes: int,
) -> list[ScheduleConflict]:
    """Recompute every schedule-level conflict from scratch.

    Double bookings are reported once per entry beyond the first at a slot so the
    caller can highlight the offending lessons individually; overloads are one
    aggregate per teacher.
    """
    entries = list(entries)
    conflicts: list[ScheduleConflict] = []
    period_hours = period_minutes / 60

    teacher_slots: dict[str, set[tuple[str, int]]] = defaultdict(set)
    for entry in entries:
        slot_key = (entry.day, entry.period)
        slots = teacher_slots[entry.teacher_id]
        if slot_key in slots:
            teacher = teachers.get(entry.teacher_id)
            teacher_name = teacher.name if teacher else entry.teacher_id
            conflicts.append(
                TeacherDoubleBookingConflict(
                    message=f"Teacher {teacher_name} is double-booked on {entry.day} period {entry.period}",
                    teacher_id=entry.teacher_id,
                    day=entry.day,
                    period=entry.period,
                    affected_entries=[entry.id],
                )
            )
        slots.add(slot_key)

    teacher_entries: dict[str, list[str]] = defaultdict(list)
    for entry in entries:
        teacher_entries[entry.teacher_id].append(entry.id)
    for teacher_id, entry_ids in teacher_entries.items():
        teacher = teachers.get(teacher_id)
        hours = len(entry_ids) * period_hours
        if teacher and hours > teacher.weekly_hour_limit:
            conflicts.append(
                TeacherOverloadConflict(
                    message=f"{teacher.name} exceeds weekly limit: {hours:.1f}/{teacher.weekly_hour_limit:g} hours",
                    teacher_id=teacher_id,
                    scheduled_hours=hours,
                    weekly_hour_limit=teacher.weekly_hour_limit,
                    affected_entries=entry_ids,
                )
            )

    room_slots: dict[str, set[tuple[str, int]]] = defaultdict(set)
    for entry in entries:
        if not entry.room_id:
            continue
        slot_key = (entry.day, entry.period)
        slots = room_slots[entry.room_id]
        if slot_key in slots:
            room = rooms.get(entry.room_id)
            room_name = room.name if room else entry.room_id
            conflicts.append(
                RoomClashConflict(
                    message=f"Room {room_name} is double-booked on {entry.day} period {entry.period}",
                    room_id=entry.room_id,
                    day=entry.day,
                    period=entry.period,
                    affected_entries=[entry.id],
                )
            )
        slots.add(slot_key)

    return conflicts


def _standard_resolutions() -> list[RoomConflictResolution]:
    return [
        RoomConflictResolution(
            type="move_to_room",
            description="Move one class to an alternative room",
            impact="low",
        ),
        RoomConflictResolution(
            type="change_time",
            description="Reschedule one of the classes",
            impact="medium",
        ),
    ]


def detect_room_conflicts(
    assignments: Iterable[RoomAssignment],
    entries: Mapping[str, TimetableEntry],
    rooms: Mapping[str, Classroom],
) -> list[RoomConflict]:
    """Group room assignments by (room, day, period); every group of two or more is a conflict.

    Assignments whose timetable entry no longer exists are ignored.
    """
    groups: dict[tuple[str, str, int], list[TimetableEntry]] = {}
    for assignment in assignments:
        entry = entries.get(assignment.timetable_entry_id)
        if entry is None:
            continue
        groups.setdefault((assignment.room_id, entry.day, entry.period), []).append(entry)

    conflicts: list[RoomConflict] = []
    for (room_id, day, period), grouped in groups.items():
        if len(grouped) < 2:
            continue
        room = rooms.get(room_id)
        conflicts.append(
            RoomConflict(
                id=f"conflict-{room_id}-{day}-{period}",
                room_id=room_id,
                time_slot_id=grouped[0].time_slot_id,
                day=day,
                period=period,
                conflicting_entries=[entry.id for entry in grouped],
                severity="error",
                message=f"{room.name if room else 'Room'} is double-booked on {day} period {period}",
                suggested_resolutions=_standard_resolutions(),
            )
        )
    return conflicts
