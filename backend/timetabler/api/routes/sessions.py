from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from timetabler.api.deps import SessionStore, get_scheduling_session, get_session_store
from timetabler.core.config import get_settings
from timetabler.core.exceptions import ResourceNotFoundError
from timetabler.schemas.conflict import AssignmentConflict, IntegrityConflict
from timetabler.schemas.reference import ClassSubjectTeacher, GradeSubjectAllocation
from timetabler.schemas.session import SessionCreate, SessionOut
from timetabler.schemas.teaching import AllocationUpdate, TeacherWorkload, TeachingAssignmentCreate
from timetabler.services.reference_checks import validate_reference_data
from timetabler.services.session import SchedulingSession, create_session
from timetabler.services.workload import compute_workloads, validate_assignments

router = APIRouter()


def _session_out(session: SchedulingSession) -> SessionOut:
    return SessionOut(
        id=session.id,
        created_at=session.created_at,
        grid=session.grid,
        entry_count=len(session.entries),
        room_assignment_count=len(session.room_assignments),
        conflict_count=len(session.conflicts),
        room_conflict_count=len(session.room_conflicts),
        publishable=session.publishable,
    )


@router.post("", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def create_scheduling_session(
    payload: SessionCreate,
    store: SessionStore = Depends(get_session_store),
) -> SessionOut:
    settings = get_settings()
    session = create_session(payload.reference, payload.grid, settings)
    store.add(session, settings.max_sessions)
    return _session_out(session)


@router.get("/{session_id}", response_model=SessionOut)
def get_scheduling_session_summary(session: SchedulingSession = Depends(get_scheduling_session)) -> SessionOut:
    return _session_out(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_scheduling_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    store.remove(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{session_id}/integrity", response_model=list[IntegrityConflict])
def reference_integrity(session: SchedulingSession = Depends(get_scheduling_session)) -> list[IntegrityConflict]:
    return validate_reference_data(session.registry)


@router.put("/{session_id}/allocations", response_model=GradeSubjectAllocation)
def set_allocation(
    payload: AllocationUpdate,
    session: SchedulingSession = Depends(get_scheduling_session),
) -> GradeSubjectAllocation:
    if payload.grade_id not in session.registry.grades:
        raise ResourceNotFoundError("Grade", payload.grade_id)
    if payload.subject_id not in session.registry.subjects:
        raise ResourceNotFoundError("Subject", payload.subject_id)
    return session.ledger.set_allocation(
        payload.grade_id,
        payload.subject_id,
        payload.weekly_hours,
        payload.semester_weeks,
    )


@router.post(
    "/{session_id}/teaching-assignments",
    response_model=ClassSubjectTeacher,
    status_code=status.HTTP_201_CREATED,
)
def assign_teacher(
    payload: TeachingAssignmentCreate,
    session: SchedulingSession = Depends(get_scheduling_session),
) -> ClassSubjectTeacher:
    registry = session.registry
    if payload.class_id not in registry.class_sections:
        raise ResourceNotFoundError("ClassSection", payload.class_id)
    if payload.subject_id not in registry.subjects:
        raise ResourceNotFoundError("Subject", payload.subject_id)
    if payload.teacher_id not in registry.teachers:
        raise ResourceNotFoundError("Teacher", payload.teacher_id)
    return session.teaching.assign(payload.class_id, payload.subject_id, payload.teacher_id)


@router.delete("/{session_id}/teaching-assignments/{assignment_id}", response_model=ClassSubjectTeacher)
def unassign_teacher(
    assignment_id: str,
    session: SchedulingSession = Depends(get_scheduling_session),
) -> ClassSubjectTeacher:
    return session.teaching.unassign(assignment_id)


@router.get("/{session_id}/workload", response_model=list[TeacherWorkload])
def teacher_workload(session: SchedulingSession = Depends(get_scheduling_session)) -> list[TeacherWorkload]:
    return compute_workloads(
        session.registry,
        session.ledger,
        session.teaching,
        session.entries.values(),
        session.period_minutes,
    )


@router.get("/{session_id}/assignment-conflicts", response_model=list[AssignmentConflict])
def assignment_conflicts(session: SchedulingSession = Depends(get_scheduling_session)) -> list[AssignmentConflict]:
    workloads = compute_workloads(session.registry, session.ledger, session.teaching)
    return validate_assignments(session.registry, session.teaching, workloads)
