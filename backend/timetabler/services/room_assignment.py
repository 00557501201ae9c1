from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone

from timetabler.core.exceptions import ResourceNotFoundError, RoomOccupiedError
from timetabler.core.numbers import round_percentage
from timetabler.models.timetable import ConflictStatus
from timetabler.schemas.grid import GridConfig
from timetabler.schemas.room import (
    RoomAssignment,
    RoomConflict,
    RoomSuggestion,
    RoomUtilization,
    RoomUtilizationAssignment,
)
from timetabler.schemas.timetable import TimetableEntry
from timetabler.services.registry import EntityRegistry
from timetabler.services.room_scoring import DEFAULT_REQUIRED_FEATURES, score_rooms
from timetabler.services.session import SchedulingSession

logger = logging.getLogger(__name__)

PEAK_HOURS_LIMIT = 3


def compute_utilization(
    registry: EntityRegistry,
    grid: GridConfig,
    assignments: Iterable[RoomAssignment],
    entries: Mapping[str, TimetableEntry],
    conflicts: Iterable[RoomConflict],
) -> list[RoomUtilization]:
    assignments = list(assignments)
    conflicts = list(conflicts)
    total_slots = grid.total_slots

    rows: list[RoomUtilization] = []
    for room in registry.classrooms.values():
        details: list[RoomUtilizationAssignment] = []
        hour_counts: Counter[str] = Counter()
        occupied = 0
        for assignment in assignments:
            if assignment.room_id != room.id:
                continue
            occupied += 1
            entry = entries.get(assignment.timetable_entry_id)
            day = entry.day if entry else ""
            period = entry.period if entry else 0
            details.append(
                RoomUtilizationAssignment(
                    day=day,
                    period=period,
                    subject=registry.subject_name(entry.subject_id) if entry else "",
                    class_name=registry.class_name(entry.class_id) if entry else "",
                    teacher=registry.teacher_name(entry.teacher_id) if entry else "",
                )
            )
            hour_counts[f"{day}-{period}"] += 1

        # Counter.most_common keeps first-seen order among equal counts.
        peak_hours = [key for key, _ in hour_counts.most_common(PEAK_HOURS_LIMIT)]
        room_type = registry.room_types.get(room.room_type_id)
        rows.append(
            RoomUtilization(
                room_id=room.id,
                room_name=room.name,
                room_type=room_type.name if room_type else room.room_type_id,
                total_slots=total_slots,
                occupied_slots=occupied,
                utilization_percentage=round_percentage(occupied, total_slots),
                peak_hours=peak_hours,
                conflicts=sum(1 for conflict in conflicts if conflict.room_id == room.id),
                assignments=details,
            )
        )
    return rows


class RoomAssignmentService:
    def __init__(self, session: SchedulingSession, required_features: Sequence[str] = DEFAULT_REQUIRED_FEATURES):
        self.session = session
        self.registry = session.registry
        self.required_features = tuple(required_features)

    def _entry(self, entry_id: str) -> TimetableEntry:
        entry = self.session.entries.get(entry_id)
        if entry is None:
            raise ResourceNotFoundError("TimetableEntry", entry_id)
        return entry

    def occupied_room_ids(self, entry: TimetableEntry) -> set[str]:
        occupied: set[str] = set()
        for assignment in self.session.room_assignments.values():
            if assignment.timetable_entry_id == entry.id:
                continue
            other = self.session.entries.get(assignment.timetable_entry_id)
            if other is not None and other.day == entry.day and other.period == entry.period:
                occupied.add(assignment.room_id)
        return occupied

    def _suggest(self, entry: TimetableEntry) -> list[RoomSuggestion]:
        if entry.subject_id not in self.registry.subjects:
            return []
        return score_rooms(
            entry,
            self.registry.classrooms.values(),
            self.registry.room_preferences(entry.subject_id),
            self.occupied_room_ids(entry),
            self.registry.class_sections.get(entry.class_id or ""),
            self.required_features,
        )

    def suggestions_for(self, entry_id: str) -> list[RoomSuggestion]:
        return self._suggest(self._entry(entry_id))

    def auto_assign(self) -> list[RoomAssignment]:
        """Greedy pass: each unassigned entry, in placement order, takes its best room.

        Rooms taken earlier in the pass are occupied for later entries; nothing is
        swapped to rescue an entry that ends up without a room.
        """
        created: list[RoomAssignment] = []
        for entry in self.session.entries.values():
            if entry.id in self.session.room_assignments:
                continue
            suggestions = self._suggest(entry)
            if not suggestions or suggestions[0].suitability_score <= 0:
                logger.debug("No suitable room for entry %s on %s period %s", entry.id, entry.day, entry.period)
                continue
            best = suggestions[0]
            assignment = RoomAssignment(
                id=f"auto-{entry.id}",
                timetable_entry_id=entry.id,
                room_id=best.room_id,
                is_auto_assigned=True,
                assigned_at=datetime.now(timezone.utc),
                assigned_by="system",
                conflict_status=ConflictStatus.warning if best.warnings else ConflictStatus.none,
            )
            self.session.room_assignments[entry.id] = assignment
            created.append(assignment)

        self.session.refresh_conflicts()
        unassigned = len(self.session.entries) - len(self.session.room_assignments)
        logger.info(
            "Auto-assigned %d room(s) in session %s; %d entries remain without a room",
            len(created),
            self.session.id,
            unassigned,
        )
        return created

    def assign_manually(self, entry_id: str, room_id: str, assigned_by: str = "user") -> RoomAssignment:
        entry = self._entry(entry_id)
        if room_id not in self.registry.classrooms:
            raise ResourceNotFoundError("Classroom", room_id)

        for assignment in self.session.room_assignments.values():
            if assignment.room_id != room_id or assignment.timetable_entry_id == entry.id:
                continue
            other = self.session.entries.get(assignment.timetable_entry_id)
            if other is not None and other.day == entry.day and other.period == entry.period:
                logger.warning(
                    "Room %s already occupied on %s period %s by entry %s",
                    room_id,
                    entry.day,
                    entry.period,
                    other.id,
                )
                raise RoomOccupiedError(room_id, entry.day, entry.period, other.id)

        self.session.room_assignments.pop(entry.id, None)
        assignment = RoomAssignment(
            id=f"manual-{entry.id}",
            timetable_entry_id=entry.id,
            room_id=room_id,
            is_auto_assigned=False,
            assigned_at=datetime.now(timezone.utc),
            assigned_by=assigned_by,
            conflict_status=ConflictStatus.none,
        )
        self.session.room_assignments[entry.id] = assignment
        logger.info("Assigned room %s to entry %s by %s", room_id, entry.id, assigned_by)
        self.session.refresh_conflicts()
        return assignment

    def unassign(self, entry_id: str) -> None:
        self._entry(entry_id)
        if self.session.room_assignments.pop(entry_id, None) is None:
            raise ResourceNotFoundError("RoomAssignment", entry_id)
        logger.info("Removed room assignment for entry %s", entry_id)
        self.session.refresh_conflicts()

    def utilization(self) -> list[RoomUtilization]:
        return compute_utilization(
            self.registry,
            self.session.grid,
            self.session.room_assignments.values(),
            self.session.entries,
            self.session.room_conflicts,
        )
