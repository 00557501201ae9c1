from __future__ import annotations

import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import ValidationError

from timetabler.core.config import Settings, get_settings
from timetabler.core.exceptions import ConfigurationError, InvalidGridError
from timetabler.schemas.conflict import ScheduleConflict
from timetabler.schemas.grid import GridConfig, parse_time_to_minutes
from timetabler.schemas.reference import ReferenceData, TimeSlot
from timetabler.schemas.room import RoomAssignment, RoomConflict
from timetabler.schemas.timetable import TimetableEntry
from timetabler.services.allocations import AllocationLedger
from timetabler.services.constraints import detect_room_conflicts, validate_constraints
from timetabler.services.registry import EntityRegistry
from timetabler.services.teaching import TeachingAssignmentTable
from timetabler.services.time_slots import default_time_slots

logger = logging.getLogger(__name__)


@dataclass
class SchedulingSession:
    """Mutable state of one timetable being edited.

    Conflict lists are derived: every mutation recomputes them from the full
    entry and assignment collections.
    """

    registry: EntityRegistry
    ledger: AllocationLedger
    teaching: TeachingAssignmentTable
    grid: GridConfig
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entries: dict[str, TimetableEntry] = field(default_factory=dict)
    # keyed by timetable entry id, one active assignment per entry
    room_assignments: dict[str, RoomAssignment] = field(default_factory=dict)
    conflicts: list[ScheduleConflict] = field(default_factory=list)
    room_conflicts: list[RoomConflict] = field(default_factory=list)

    @property
    def period_minutes(self) -> int:
        return self.grid.period_minutes

    @property
    def publishable(self) -> bool:
        return not any(c.severity == "error" for c in self.conflicts) and not any(
            c.severity == "error" for c in self.room_conflicts
        )

    def refresh_conflicts(self) -> None:
        for entry in self.entries.values():
            assignment = self.room_assignments.get(entry.id)
            entry.room_id = assignment.room_id if assignment else None

        self.conflicts = validate_constraints(
            self.entries.values(),
            self.registry.teachers,
            self.registry.classrooms,
            self.period_minutes,
        )
        self.room_conflicts = detect_room_conflicts(
            self.room_assignments.values(),
            self.entries,
            self.registry.classrooms,
        )
        logger.debug(
            "Session %s: %d entries, %d schedule conflicts, %d room conflicts",
            self.id,
            len(self.entries),
            len(self.conflicts),
            len(self.room_conflicts),
        )


def _grid_from_time_slots(time_slots: list[TimeSlot]) -> GridConfig:
    # the most common slot length is the period length
    durations = Counter(
        parse_time_to_minutes(slot.end_time) - parse_time_to_minutes(slot.start_time) for slot in time_slots
    )
    try:
        return GridConfig(
            days=list(dict.fromkeys(slot.day for slot in time_slots)),
            periods_per_day=max(slot.period for slot in time_slots),
            period_minutes=durations.most_common(1)[0][0],
        )
    except ValidationError as exc:
        raise InvalidGridError(
            "Time slots do not describe a usable timetable grid",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc


def _check_grid_coverage(grid: GridConfig, time_slots: list[TimeSlot]) -> None:
    covered = {(slot.day, slot.period) for slot in time_slots}
    missing = [
        f"{day}/{period}"
        for day in grid.days
        for period in range(1, grid.periods_per_day + 1)
        if (day, period) not in covered
    ]
    if missing:
        raise InvalidGridError(
            f"{len(missing)} grid cell(s) have no time slot",
            details={"missing_cells": missing},
        )


def create_session(
    reference: ReferenceData,
    grid: GridConfig | None = None,
    settings: Settings | None = None,
) -> SchedulingSession:
    settings = settings or get_settings()
    if grid is None and reference.time_slots:
        grid = _grid_from_time_slots(reference.time_slots)
    elif grid is not None and reference.time_slots:
        _check_grid_coverage(grid, reference.time_slots)
    grid = grid or GridConfig(
        days=settings.school_days,
        periods_per_day=settings.periods_per_day,
        period_minutes=settings.period_minutes,
    )
    time_slots = None
    if not reference.time_slots:
        try:
            time_slots = default_time_slots(grid, settings)
        except ValueError as exc:
            raise ConfigurationError(f"Unable to derive time slots: {exc}") from exc

    session = SchedulingSession(
        registry=EntityRegistry(reference, time_slots=time_slots),
        ledger=AllocationLedger(reference.grade_subject_allocations),
        teaching=TeachingAssignmentTable(reference.teaching_assignments),
        grid=grid,
    )
    session.refresh_conflicts()
    logger.info(
        "Created scheduling session %s (%d days x %d periods, %d rooms, %d teachers)",
        session.id,
        len(grid.days),
        grid.periods_per_day,
        len(session.registry.classrooms),
        len(session.registry.teachers),
    )
    return session
