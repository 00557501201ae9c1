from __future__ import annotations

from timetabler.schemas.reference import (
    ClassSection,
    Classroom,
    Grade,
    ReferenceData,
    RoomType,
    Subject,
    SubjectRoomType,
    Teacher,
    TimeSlot,
)


class EntityRegistry:
    """Id-keyed lookup tables over a reference snapshot.

    Dicts keep snapshot order, which is the order rooms are offered to the scorer
    and subjects are reported in progress maps.
    """

    def __init__(self, reference: ReferenceData, time_slots: list[TimeSlot] | None = None):
        self.subjects: dict[str, Subject] = {item.id: item for item in reference.subjects}
        self.grades: dict[str, Grade] = {item.id: item for item in reference.grades}
        self.class_sections: dict[str, ClassSection] = {item.id: item for item in reference.class_sections}
        self.teachers: dict[str, Teacher] = {item.id: item for item in reference.teachers}
        self.room_types: dict[str, RoomType] = {item.id: item for item in reference.room_types}
        self.classrooms: dict[str, Classroom] = {item.id: item for item in reference.classrooms}
        self.subject_room_types: list[SubjectRoomType] = list(reference.subject_room_types)
        slots = time_slots if time_slots is not None else reference.time_slots
        self.time_slots: dict[str, TimeSlot] = {slot.id: slot for slot in slots}
        self._slot_index: dict[tuple[str, int], TimeSlot] = {(slot.day, slot.period): slot for slot in slots}

    def time_slot_at(self, day: str, period: int) -> TimeSlot | None:
        return self._slot_index.get((day, period))

    def room_preferences(self, subject_id: str) -> list[SubjectRoomType]:
        rows = [row for row in self.subject_room_types if row.subject_id == subject_id]
        return sorted(rows, key=lambda row: row.priority)

    def subject_name(self, subject_id: str | None) -> str:
        subject = self.subjects.get(subject_id or "")
        return subject.name if subject else "Unknown Subject"

    def teacher_name(self, teacher_id: str | None) -> str:
        teacher = self.teachers.get(teacher_id or "")
        return teacher.name if teacher else "Unknown Teacher"

    def class_name(self, class_id: str | None) -> str:
        section = self.class_sections.get(class_id or "")
        return section.name if section else "Unknown Class"

    def room_name(self, room_id: str | None) -> str:
        room = self.classrooms.get(room_id or "")
        return room.name if room else "Unknown Room"
