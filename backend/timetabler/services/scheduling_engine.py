from __future__ import annotations

import logging
import uuid

from timetabler.core.exceptions import NoTeacherAssignedError, ResourceNotFoundError, SchedulerError
from timetabler.core.numbers import round_percentage
from timetabler.models.timetable import ViewMode
from timetabler.schemas.timetable import SlotOut, SubjectProgress, TimetableEntry
from timetabler.services.session import SchedulingSession

logger = logging.getLogger(__name__)


class SchedulingEngine:
    def __init__(self, session: SchedulingSession):
        self.session = session
        self.registry = session.registry

    def _require_entity(self, view_mode: ViewMode, entity_id: str) -> None:
        if view_mode == ViewMode.class_:
            if entity_id not in self.registry.class_sections:
                raise ResourceNotFoundError("ClassSection", entity_id)
        elif entity_id not in self.registry.teachers:
            raise ResourceNotFoundError("Teacher", entity_id)

    def _owns(self, entry: TimetableEntry, view_mode: ViewMode, entity_id: str) -> bool:
        if view_mode == ViewMode.class_:
            return entry.class_id == entity_id
        return entry.teacher_id == entity_id

    def available_subjects(self, view_mode: ViewMode, entity_id: str) -> list[str]:
        if view_mode == ViewMode.class_:
            section = self.registry.class_sections[entity_id]
            allocated = self.session.ledger.subjects_for_grade(section.grade_id)
            return [subject_id for subject_id in self.registry.subjects if subject_id in allocated]
        teacher = self.registry.teachers[entity_id]
        return [subject_id for subject_id in self.registry.subjects if subject_id in teacher.subjects]

    def _required_hours(self, subject_id: str, view_mode: ViewMode, entity_id: str) -> float:
        ledger = self.session.ledger
        if view_mode == ViewMode.class_:
            section = self.registry.class_sections[entity_id]
            return ledger.weekly_hours(section.grade_id, subject_id)
        total = 0.0
        for assignment in self.session.teaching.active_for_teacher(entity_id, subject_id):
            section = self.registry.class_sections.get(assignment.class_id)
            if section is not None:
                total += ledger.weekly_hours(section.grade_id, subject_id)
        return total

    def subject_progress(self, view_mode: ViewMode, entity_id: str) -> dict[str, SubjectProgress]:
        self._require_entity(view_mode, entity_id)
        period_hours = self.session.period_minutes / 60
        progress: dict[str, SubjectProgress] = {}
        for subject_id in self.available_subjects(view_mode, entity_id):
            required = self._required_hours(subject_id, view_mode, entity_id)
            count = sum(
                1
                for entry in self.session.entries.values()
                if entry.subject_id == subject_id and self._owns(entry, view_mode, entity_id)
            )
            scheduled = count * period_hours
            progress[subject_id] = SubjectProgress(
                scheduled=scheduled,
                total=required,
                percentage=round_percentage(scheduled, required),
            )
        return progress

    def valid_slots(self, subject_id: str, view_mode: ViewMode, entity_id: str) -> list[SlotOut]:
        progress = self.subject_progress(view_mode, entity_id).get(subject_id)
        if progress is None or progress.percentage >= 100:
            return []

        occupied = {
            (entry.day, entry.period)
            for entry in self.session.entries.values()
            if self._owns(entry, view_mode, entity_id)
        }
        grid = self.session.grid
        return [
            SlotOut(day=day, period=period)
            for day in grid.days
            for period in range(1, grid.periods_per_day + 1)
            if (day, period) not in occupied and self.registry.time_slot_at(day, period) is not None
        ]

    def _resolve_class_for_teacher(self, teacher_id: str, subject_id: str, day: str, period: int) -> str | None:
        candidates = [row.class_id for row in self.session.teaching.active_for_teacher(teacher_id, subject_id)]
        busy = {
            entry.class_id
            for entry in self.session.entries.values()
            if entry.day == day and entry.period == period
        }
        for class_id in candidates:
            if class_id not in busy:
                return class_id
        return candidates[0] if candidates else None

    def add_entry(
        self,
        day: str,
        period: int,
        subject_id: str,
        view_mode: ViewMode,
        entity_id: str,
        class_id: str | None = None,
    ) -> TimetableEntry:
        self._require_entity(view_mode, entity_id)
        grid = self.session.grid
        if day not in grid.days or not 1 <= period <= grid.periods_per_day:
            raise SchedulerError(
                f"{day} period {period} is outside the configured timetable grid",
                details={"day": day, "period": period},
            )

        progress = self.subject_progress(view_mode, entity_id).get(subject_id)
        if progress is None:
            raise SchedulerError(
                "Subject is not part of this timetable's curriculum",
                details={"subject_id": subject_id, "entity_id": entity_id, "view_mode": view_mode.value},
            )
        if progress.percentage >= 100:
            raise SchedulerError(
                "This subject is fully scheduled. No more periods can be added.",
                details={"subject_id": subject_id, "scheduled": progress.scheduled, "total": progress.total},
            )

        if view_mode == ViewMode.class_:
            teacher_id = self.session.teaching.active_teacher_id(entity_id, subject_id)
            if not teacher_id:
                logger.warning("No active teacher for class %s subject %s", entity_id, subject_id)
                raise NoTeacherAssignedError(entity_id, subject_id)
            class_id = entity_id
        else:
            teacher_id = entity_id
            if class_id is None:
                class_id = self._resolve_class_for_teacher(teacher_id, subject_id, day, period)
            elif class_id not in self.registry.class_sections:
                raise ResourceNotFoundError("ClassSection", class_id)

        time_slot = self.registry.time_slot_at(day, period)
        if time_slot is None:
            raise ResourceNotFoundError("TimeSlot", f"{day}/{period}")

        entry = TimetableEntry(
            id=str(uuid.uuid4()),
            class_id=class_id,
            teacher_id=teacher_id,
            subject_id=subject_id,
            time_slot_id=time_slot.id,
            day=day,
            period=period,
        )
        self.session.entries[entry.id] = entry
        logger.info(
            "Placed subject %s for class %s with teacher %s on %s period %s",
            subject_id,
            class_id,
            teacher_id,
            day,
            period,
        )
        self.session.refresh_conflicts()
        return entry

    def remove_entry(self, entry_id: str) -> None:
        if self.session.entries.pop(entry_id, None) is None:
            raise ResourceNotFoundError("TimetableEntry", entry_id)
        dropped = self.session.room_assignments.pop(entry_id, None)
        logger.info("Removed timetable entry %s%s", entry_id, " and its room assignment" if dropped else "")
        self.session.refresh_conflicts()

    def clear(self) -> None:
        self.session.entries.clear()
        self.session.room_assignments.clear()
        self.session.refresh_conflicts()
        logger.info("Cleared timetable for session %s", self.session.id)
