from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from timetabler.api.deps import get_scheduling_session
from timetabler.models.timetable import ViewMode
from timetabler.schemas.conflict import ScheduleConflict
from timetabler.schemas.timetable import EntryCreate, SlotOut, SubjectProgress, TimetableEntry
from timetabler.services.scheduling_engine import SchedulingEngine
from timetabler.services.session import SchedulingSession

router = APIRouter()


@router.get("/{session_id}/progress", response_model=dict[str, SubjectProgress])
def subject_progress(
    entity_id: str = Query(min_length=1),
    view_mode: ViewMode = ViewMode.class_,
    session: SchedulingSession = Depends(get_scheduling_session),
) -> dict[str, SubjectProgress]:
    return SchedulingEngine(session).subject_progress(view_mode, entity_id)


@router.get("/{session_id}/valid-slots", response_model=list[SlotOut])
def valid_slots(
    subject_id: str = Query(min_length=1),
    entity_id: str = Query(min_length=1),
    view_mode: ViewMode = ViewMode.class_,
    session: SchedulingSession = Depends(get_scheduling_session),
) -> list[SlotOut]:
    return SchedulingEngine(session).valid_slots(subject_id, view_mode, entity_id)


@router.get("/{session_id}/entries", response_model=list[TimetableEntry])
def list_entries(session: SchedulingSession = Depends(get_scheduling_session)) -> list[TimetableEntry]:
    return list(session.entries.values())


@router.post("/{session_id}/entries", response_model=TimetableEntry, status_code=status.HTTP_201_CREATED)
def add_entry(
    payload: EntryCreate,
    session: SchedulingSession = Depends(get_scheduling_session),
) -> TimetableEntry:
    return SchedulingEngine(session).add_entry(
        payload.day,
        payload.period,
        payload.subject_id,
        payload.view_mode,
        payload.entity_id,
        class_id=payload.class_id,
    )


@router.delete("/{session_id}/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_entry(entry_id: str, session: SchedulingSession = Depends(get_scheduling_session)) -> Response:
    SchedulingEngine(session).remove_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{session_id}/entries", status_code=status.HTTP_204_NO_CONTENT)
def clear_entries(session: SchedulingSession = Depends(get_scheduling_session)) -> Response:
    SchedulingEngine(session).clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{session_id}/conflicts", response_model=list[ScheduleConflict])
def schedule_conflicts(session: SchedulingSession = Depends(get_scheduling_session)) -> list[ScheduleConflict]:
    return session.conflicts
