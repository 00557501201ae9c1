from __future__ import annotations

from collections.abc import Callable, Iterable

from timetabler.schemas.conflict import (
    DuplicateKeyConflict,
    IntegrityConflict,
    InvalidSubjectReferenceConflict,
    MissingRoomTypeConflict,
    TeacherWithoutSubjectsConflict,
    UncoveredSubjectConflict,
)
from timetabler.services.registry import EntityRegistry


def _duplicates(items: Iterable, key: Callable) -> list[tuple[str, list[str]]]:
    groups: dict[str, list[str]] = {}
    for item in items:
        value = key(item)
        if not value:
            continue
        groups.setdefault(value, []).append(item.id)
    return [(value, ids) for value, ids in groups.items() if len(ids) > 1]


def validate_reference_data(registry: EntityRegistry) -> list[IntegrityConflict]:
    """Advisory integrity report over a reference snapshot. Never raises."""
    conflicts: list[IntegrityConflict] = []
    rooms = registry.classrooms.values()
    subjects = registry.subjects.values()
    teachers = registry.teachers.values()

    duplicate_checks = (
        ("classroom", "name", rooms, lambda room: room.name.strip().lower(), "Rename one of the classrooms"),
        ("classroom", "code", rooms, lambda room: room.code.strip().lower(), "Use unique codes for each classroom"),
        ("subject", "name", subjects, lambda subject: subject.name.strip().lower(), "Rename one of the subjects"),
        ("subject", "code", subjects, lambda subject: subject.code.lower(), "Use unique subject codes"),
        ("teacher", "email", teachers, lambda teacher: str(teacher.email).lower(), "Give each teacher their own e-mail"),
    )
    for entity, field, items, key, suggestion in duplicate_checks:
        for value, ids in _duplicates(items, key):
            conflicts.append(
                DuplicateKeyConflict(
                    message=f'Duplicate {entity} {field}: "{value}"',
                    entity=entity,
                    field=field,
                    value=value,
                    affected_ids=ids,
                    suggestions=[suggestion],
                )
            )

    for room in rooms:
        if room.room_type_id not in registry.room_types:
            conflicts.append(
                MissingRoomTypeConflict(
                    message=f'Classroom "{room.name}" has invalid room type',
                    room_type_id=room.room_type_id,
                    affected_ids=[room.id],
                    suggestions=["Assign a valid room type", "Create the missing room type"],
                )
            )

    covered: set[str] = set()
    for teacher in teachers:
        covered.update(teacher.subjects)
        if not teacher.subjects:
            conflicts.append(
                TeacherWithoutSubjectsConflict(
                    message=f"{teacher.name} has no subjects assigned",
                    affected_ids=[teacher.id],
                    suggestions=["Assign at least one subject to this teacher"],
                )
            )
        unknown = [subject_id for subject_id in teacher.subjects if subject_id not in registry.subjects]
        if unknown:
            conflicts.append(
                InvalidSubjectReferenceConflict(
                    message=f"{teacher.name} has invalid subject assignments: {', '.join(unknown)}",
                    subject_ids=unknown,
                    affected_ids=[teacher.id],
                    suggestions=["Remove invalid subject assignments"],
                )
            )

    uncovered = [subject for subject in subjects if subject.id not in covered]
    if uncovered:
        conflicts.append(
            UncoveredSubjectConflict(
                message=f"No teachers assigned to: {', '.join(subject.name for subject in uncovered)}",
                affected_ids=[subject.id for subject in uncovered],
                suggestions=["Assign qualified teachers to uncovered subjects"],
            )
        )
    return conflicts
