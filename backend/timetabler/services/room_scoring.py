from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence

from timetabler.schemas.reference import ClassSection, Classroom, SubjectRoomType
from timetabler.schemas.room import RoomSuggestion
from timetabler.schemas.timetable import TimetableEntry

DEFAULT_REQUIRED_FEATURES = ("Projector", "Whiteboard")

PRIORITY_WEIGHT = 30
REQUIRED_TYPE_BONUS = 20
UNPREFERRED_TYPE_PENALTY = 20
INSUFFICIENT_CAPACITY_PENALTY = 50
FEATURES_BONUS = 10


def _capacity_score(capacity: int, student_count: int) -> tuple[int, str | None, str | None]:
    if capacity < student_count:
        return -INSUFFICIENT_CAPACITY_PENALTY, None, f"Insufficient capacity ({capacity} < {student_count})"
    ratio = student_count / capacity
    if ratio > 0.8:
        return 15, "Good capacity utilization", None
    if ratio > 0.5:
        return 10, "Adequate capacity", None
    return 5, None, "Room may be too large"


def score_rooms(
    entry: TimetableEntry,
    rooms: Iterable[Classroom],
    preferences: Iterable[SubjectRoomType],
    occupied_room_ids: Collection[str],
    class_section: ClassSection | None,
    required_features: Sequence[str] = DEFAULT_REQUIRED_FEATURES,
) -> list[RoomSuggestion]:
    """Rank every free active room for one lesson, best first.

    Pure: identical inputs always produce the same scores in the same order. Ties
    keep the order rooms were given in.
    """
    if class_section is None:
        return []

    subject_preferences = sorted(
        (row for row in preferences if row.subject_id == entry.subject_id),
        key=lambda row: row.priority,
    )
    by_room_type = {}
    for row in subject_preferences:
        by_room_type.setdefault(row.room_type_id, row)

    suggestions: list[RoomSuggestion] = []
    for room in rooms:
        if not room.is_active or room.id in occupied_room_ids:
            continue

        score = 0
        reasons: list[str] = []
        warnings: list[str] = []

        preference = by_room_type.get(room.room_type_id)
        if preference is not None:
            score += (4 - preference.priority) * PRIORITY_WEIGHT
            reasons.append("Preferred room type" if preference.priority == 1 else "Suitable room type")
            if preference.is_required:
                score += REQUIRED_TYPE_BONUS
                reasons.append("Required room type")
        elif subject_preferences:
            score -= UNPREFERRED_TYPE_PENALTY
            warnings.append("Not a preferred room type for this subject")

        delta, reason, warning = _capacity_score(room.capacity, class_section.student_count)
        score += delta
        if reason:
            reasons.append(reason)
        if warning:
            warnings.append(warning)

        if all(feature in room.features for feature in required_features):
            score += FEATURES_BONUS
            reasons.append("Has required features")
        else:
            warnings.append("Missing some required features")

        suggestions.append(
            RoomSuggestion(
                room_id=room.id,
                room_name=room.name,
                suitability_score=max(0, score),
                reasons=reasons,
                warnings=warnings,
            )
        )

    # stable: equal scores keep room order
    return sorted(suggestions, key=lambda suggestion: suggestion.suitability_score, reverse=True)
