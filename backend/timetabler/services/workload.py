from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from timetabler.core.numbers import round_percentage
from timetabler.schemas.conflict import (
    AssignmentConflict,
    ClassSubjectDuplicateConflict,
    TeacherOvercommittedConflict,
    TeacherSubjectMismatchConflict,
)
from timetabler.schemas.teaching import SubjectWorkload, TeacherWorkload
from timetabler.schemas.timetable import TimetableEntry
from timetabler.services.allocations import AllocationLedger
from timetabler.services.registry import EntityRegistry
from timetabler.services.teaching import TeachingAssignmentTable


def _format_hours(value: float) -> str:
    return f"{value:g}"


def compute_workloads(
    registry: EntityRegistry,
    ledger: AllocationLedger,
    teaching: TeachingAssignmentTable,
    entries: Iterable[TimetableEntry] = (),
    period_minutes: int = 45,
) -> list[TeacherWorkload]:
    scheduled_counts: dict[str, int] = defaultdict(int)
    for entry in entries:
        scheduled_counts[entry.teacher_id] += 1

    workloads: list[TeacherWorkload] = []
    for teacher in registry.teachers.values():
        assignments = teaching.active_for_teacher(teacher.id)
        per_subject: dict[str, list[float]] = {}
        total_hours = 0.0
        for assignment in assignments:
            section = registry.class_sections.get(assignment.class_id)
            if section is None:
                continue
            allocation = ledger.get(section.grade_id, assignment.subject_id)
            if allocation is None:
                continue
            bucket = per_subject.setdefault(assignment.subject_id, [0, 0.0])
            bucket[0] += 1
            bucket[1] += allocation.weekly_hours
            total_hours += allocation.weekly_hours

        workloads.append(
            TeacherWorkload(
                teacher_id=teacher.id,
                teacher_name=teacher.name,
                total_classes=len(assignments),
                total_weekly_hours=total_hours,
                weekly_hour_limit=teacher.weekly_hour_limit,
                utilization_percentage=round_percentage(total_hours, teacher.weekly_hour_limit),
                current_weekly_hours=scheduled_counts[teacher.id] * period_minutes / 60,
                subjects=[
                    SubjectWorkload(
                        subject_id=subject_id,
                        subject_name=registry.subject_name(subject_id),
                        class_count=int(count),
                        estimated_weekly_hours=hours,
                    )
                    for subject_id, (count, hours) in per_subject.items()
                ],
            )
        )
    return workloads


def validate_assignments(
    registry: EntityRegistry,
    teaching: TeachingAssignmentTable,
    workloads: list[TeacherWorkload],
) -> list[AssignmentConflict]:
    conflicts: list[AssignmentConflict] = []
    active = teaching.active()

    for assignment in active:
        teacher = registry.teachers.get(assignment.teacher_id)
        if teacher and assignment.subject_id not in teacher.subjects:
            subject_name = registry.subject_name(assignment.subject_id)
            conflicts.append(
                TeacherSubjectMismatchConflict(
                    message=f"{teacher.name} is not qualified to teach {subject_name}",
                    affected_assignments=[assignment.id],
                    suggestions=[
                        f"Assign a qualified teacher for {subject_name}",
                        f"Add {subject_name} to {teacher.name}'s qualifications",
                    ],
                )
            )

    grouped: dict[tuple[str, str], list[str]] = defaultdict(list)
    for assignment in active:
        grouped[(assignment.class_id, assignment.subject_id)].append(assignment.id)
    for (class_id, subject_id), assignment_ids in grouped.items():
        if len(assignment_ids) > 1:
            conflicts.append(
                ClassSubjectDuplicateConflict(
                    message=(
                        f"{registry.class_name(class_id)} has {len(assignment_ids)} active teachers "
                        f"for {registry.subject_name(subject_id)}"
                    ),
                    affected_assignments=assignment_ids,
                    suggestions=["Deactivate all but one assignment for this class and subject"],
                )
            )

    for workload in workloads:
        if workload.utilization_percentage > 100:
            conflicts.append(
                TeacherOvercommittedConflict(
                    message=(
                        f"{workload.teacher_name} is overcommitted: "
                        f"{_format_hours(workload.total_weekly_hours)}/{_format_hours(workload.weekly_hour_limit)} "
                        f"hours ({workload.utilization_percentage}%)"
                    ),
                    teacher_id=workload.teacher_id,
                    affected_assignments=[a.id for a in active if a.teacher_id == workload.teacher_id],
                    suggestions=[
                        "Redistribute some classes to other teachers",
                        "Increase teacher's weekly hour limit",
                        "Hire additional qualified teachers",
                    ],
                )
            )
    return conflicts
