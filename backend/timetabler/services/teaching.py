from __future__ import annotations

import logging
from collections.abc import Iterable

from timetabler.core.exceptions import ResourceNotFoundError
from timetabler.schemas.reference import ClassSubjectTeacher, utc_now

logger = logging.getLogger(__name__)


class TeachingAssignmentTable:
    """(class, subject) -> teacher bindings with soft-deleted history.

    At most one row per (class, subject) is active; reassignment deactivates the
    previous row instead of deleting it.
    """

    def __init__(self, assignments: Iterable[ClassSubjectTeacher] = ()):
        self._rows: list[ClassSubjectTeacher] = [row.model_copy() for row in assignments]

    def __iter__(self):
        return iter(self._rows)

    def active(self) -> list[ClassSubjectTeacher]:
        return [row for row in self._rows if row.is_active]

    def active_teacher_id(self, class_id: str, subject_id: str) -> str | None:
        for row in self._rows:
            if row.is_active and row.class_id == class_id and row.subject_id == subject_id:
                return row.teacher_id
        return None

    def active_for_teacher(self, teacher_id: str, subject_id: str | None = None) -> list[ClassSubjectTeacher]:
        return [
            row
            for row in self._rows
            if row.is_active and row.teacher_id == teacher_id and (subject_id is None or row.subject_id == subject_id)
        ]

    def assign(self, class_id: str, subject_id: str, teacher_id: str) -> ClassSubjectTeacher:
        now = utc_now()
        for row in self._rows:
            if row.is_active and row.class_id == class_id and row.subject_id == subject_id:
                row.is_active = False
                row.updated_at = now
                logger.info(
                    "Deactivated teaching assignment %s (teacher %s) for class %s subject %s",
                    row.id,
                    row.teacher_id,
                    class_id,
                    subject_id,
                )
        assignment = ClassSubjectTeacher(
            class_id=class_id,
            subject_id=subject_id,
            teacher_id=teacher_id,
            created_at=now,
            updated_at=now,
        )
        self._rows.append(assignment)
        logger.info("Assigned teacher %s to class %s subject %s", teacher_id, class_id, subject_id)
        return assignment

    def unassign(self, assignment_id: str) -> ClassSubjectTeacher:
        for row in self._rows:
            if row.id == assignment_id:
                if row.is_active:
                    row.is_active = False
                    row.updated_at = utc_now()
                return row
        raise ResourceNotFoundError("ClassSubjectTeacher", assignment_id)
