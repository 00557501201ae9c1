from __future__ import annotations

from collections.abc import Iterable

from timetabler.core.exceptions import ResourceNotFoundError
from timetabler.schemas.reference import GradeSubjectAllocation


class AllocationLedger:
    """Weekly curriculum hours per (grade, subject)."""

    def __init__(self, allocations: Iterable[GradeSubjectAllocation] = ()):
        self._rows: dict[tuple[str, str], GradeSubjectAllocation] = {}
        for allocation in allocations:
            self._rows[(allocation.grade_id, allocation.subject_id)] = allocation

    def __iter__(self):
        return iter(self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, grade_id: str, subject_id: str) -> GradeSubjectAllocation | None:
        return self._rows.get((grade_id, subject_id))

    def weekly_hours(self, grade_id: str, subject_id: str) -> float:
        allocation = self.get(grade_id, subject_id)
        return allocation.weekly_hours if allocation else 0

    def subjects_for_grade(self, grade_id: str) -> set[str]:
        return {subject_id for (row_grade, subject_id) in self._rows if row_grade == grade_id}

    def set_allocation(
        self,
        grade_id: str,
        subject_id: str,
        weekly_hours: float,
        semester_weeks: int,
    ) -> GradeSubjectAllocation:
        existing = self.get(grade_id, subject_id)
        # Re-validated through the model so total_hours is always the product.
        allocation = GradeSubjectAllocation(
            grade_id=grade_id,
            subject_id=subject_id,
            weekly_hours=weekly_hours,
            semester_weeks=semester_weeks,
            **({"id": existing.id} if existing else {}),
        )
        self._rows[(grade_id, subject_id)] = allocation
        return allocation

    def remove(self, grade_id: str, subject_id: str) -> None:
        if self._rows.pop((grade_id, subject_id), None) is None:
            raise ResourceNotFoundError("GradeSubjectAllocation", f"{grade_id}/{subject_id}")
