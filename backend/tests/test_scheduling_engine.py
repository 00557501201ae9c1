import pytest

from timetabler.core.exceptions import NoTeacherAssignedError, ResourceNotFoundError, SchedulerError
from timetabler.models.timetable import ViewMode
from timetabler.services.scheduling_engine import SchedulingEngine


def test_class_progress_lists_allocated_subjects(session):
    engine = SchedulingEngine(session)
    progress = engine.subject_progress(ViewMode.class_, "9a")

    assert list(progress) == ["math", "eng", "sci", "pe"]
    assert progress["math"].total == 5
    assert progress["math"].scheduled == 0
    assert progress["math"].percentage == 0


def test_progress_counts_scheduled_periods_in_hours(session):
    engine = SchedulingEngine(session)
    engine.add_entry("Monday", 1, "math", ViewMode.class_, "9a")

    progress = engine.subject_progress(ViewMode.class_, "9a")
    assert progress["math"].scheduled == pytest.approx(0.75)
    assert progress["math"].percentage == 15
    # other classes are untouched
    assert engine.subject_progress(ViewMode.class_, "9b")["math"].scheduled == 0


def test_teacher_progress_sums_allocations_of_assigned_classes(session):
    engine = SchedulingEngine(session)
    progress = engine.subject_progress(ViewMode.teacher, "t1")

    assert list(progress) == ["math", "sci"]
    assert progress["math"].total == 10
    # qualified for science but not teaching it anywhere
    assert progress["sci"].total == 0
    assert progress["sci"].percentage == 0


def test_progress_for_unknown_entity_raises(session):
    with pytest.raises(ResourceNotFoundError):
        SchedulingEngine(session).subject_progress(ViewMode.class_, "missing")


def test_valid_slots_cover_free_grid_cells(session):
    engine = SchedulingEngine(session)
    assert len(engine.valid_slots("math", ViewMode.class_, "9a")) == 40

    engine.add_entry("Monday", 1, "eng", ViewMode.class_, "9a")
    slots = engine.valid_slots("math", ViewMode.class_, "9a")

    assert len(slots) == 39
    assert all((slot.day, slot.period) != ("Monday", 1) for slot in slots)
    assert (slots[0].day, slots[0].period) == ("Monday", 2)


def test_valid_slots_empty_for_subject_outside_curriculum(session):
    assert SchedulingEngine(session).valid_slots("unknown", ViewMode.class_, "9a") == []


def test_fully_scheduled_subject_has_no_valid_slots(session):
    engine = SchedulingEngine(session)
    # 1.5 weekly hours == two 45 minute periods
    engine.add_entry("Monday", 1, "pe", ViewMode.class_, "9a")
    assert engine.valid_slots("pe", ViewMode.class_, "9a")
    engine.add_entry("Tuesday", 1, "pe", ViewMode.class_, "9a")

    assert engine.subject_progress(ViewMode.class_, "9a")["pe"].percentage == 100
    assert engine.valid_slots("pe", ViewMode.class_, "9a") == []
    with pytest.raises(SchedulerError):
        engine.add_entry("Wednesday", 1, "pe", ViewMode.class_, "9a")


def test_add_entry_resolves_teacher_and_time_slot(session):
    entry = SchedulingEngine(session).add_entry("Tuesday", 3, "math", ViewMode.class_, "9a")

    assert entry.class_id == "9a"
    assert entry.teacher_id == "t1"
    assert entry.subject_id == "math"
    slot = session.registry.time_slots[entry.time_slot_id]
    assert (slot.day, slot.period) == ("Tuesday", 3)
    assert (entry.day, entry.period) == ("Tuesday", 3)
    assert session.entries[entry.id] is entry


def test_add_entry_without_teacher_is_refused(session):
    engine = SchedulingEngine(session)
    with pytest.raises(NoTeacherAssignedError) as exc_info:
        engine.add_entry("Monday", 1, "sci", ViewMode.class_, "9a")

    assert exc_info.value.status_code == 409
    assert exc_info.value.details["code"] == "NoTeacherAssigned"
    assert session.entries == {}


def test_add_entry_uses_reassigned_teacher(session):
    engine = SchedulingEngine(session)
    session.teaching.assign("9a", "sci", "t1")

    entry = engine.add_entry("Monday", 1, "sci", ViewMode.class_, "9a")
    assert entry.teacher_id == "t1"


def test_add_entry_outside_grid_is_rejected(session):
    engine = SchedulingEngine(session)
    with pytest.raises(SchedulerError):
        engine.add_entry("Monday", 9, "math", ViewMode.class_, "9a")
    with pytest.raises(SchedulerError):
        engine.add_entry("Saturday", 1, "math", ViewMode.class_, "9a")


def test_teacher_mode_picks_a_free_class(session):
    engine = SchedulingEngine(session)
    first = engine.add_entry("Monday", 1, "math", ViewMode.class_, "9a")
    entry = engine.add_entry("Monday", 2, "math", ViewMode.teacher, "t1")

    assert first.class_id == "9a"
    assert entry.teacher_id == "t1"
    assert entry.class_id == "9a"

    engine.add_entry("Monday", 3, "eng", ViewMode.class_, "9a")
    busy_slot = engine.add_entry("Monday", 3, "math", ViewMode.teacher, "t1")
    assert busy_slot.class_id == "9b"


def test_entry_mutations_recompute_conflicts(session):
    engine = SchedulingEngine(session)
    engine.add_entry("Monday", 1, "math", ViewMode.class_, "9a")
    second = engine.add_entry("Monday", 1, "math", ViewMode.class_, "9b")

    assert [conflict.type for conflict in session.conflicts] == ["teacher_double_booking"]
    assert session.conflicts[0].affected_entries == [second.id]
    assert not session.publishable

    engine.remove_entry(second.id)
    assert session.conflicts == []
    assert session.publishable


def test_remove_unknown_entry_raises(session):
    with pytest.raises(ResourceNotFoundError):
        SchedulingEngine(session).remove_entry("missing")


def test_remove_and_re_add_frees_the_slot(session):
    engine = SchedulingEngine(session)
    entry = engine.add_entry("Friday", 8, "math", ViewMode.class_, "9a")
    engine.remove_entry(entry.id)

    assert ("Friday", 8) in {(s.day, s.period) for s in engine.valid_slots("math", ViewMode.class_, "9a")}
    again = engine.add_entry("Friday", 8, "math", ViewMode.class_, "9a")
    assert again.id != entry.id
    assert len(session.entries) == 1


def test_clear_drops_entries_and_room_assignments(session):
    engine = SchedulingEngine(session)
    engine.add_entry("Monday", 1, "math", ViewMode.class_, "9a")
    engine.clear()

    assert session.entries == {}
    assert session.room_assignments == {}
    assert session.conflicts == []
