from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from timetabler.api.deps import get_scheduling_session
from timetabler.core.config import get_settings
from timetabler.schemas.room import (
    RoomAssignment,
    RoomAssignmentRequest,
    RoomConflict,
    RoomSuggestion,
    RoomUtilization,
)
from timetabler.services.room_assignment import RoomAssignmentService
from timetabler.services.session import SchedulingSession

router = APIRouter()


def _service(session: SchedulingSession) -> RoomAssignmentService:
    return RoomAssignmentService(session, get_settings().required_room_features)


@router.get("/{session_id}/entries/{entry_id}/room-suggestions", response_model=list[RoomSuggestion])
def room_suggestions(
    entry_id: str,
    session: SchedulingSession = Depends(get_scheduling_session),
) -> list[RoomSuggestion]:
    return _service(session).suggestions_for(entry_id)


@router.post("/{session_id}/rooms/auto-assign", response_model=list[RoomAssignment])
def auto_assign_rooms(session: SchedulingSession = Depends(get_scheduling_session)) -> list[RoomAssignment]:
    return _service(session).auto_assign()


@router.put("/{session_id}/entries/{entry_id}/room", response_model=RoomAssignment)
def assign_room(
    entry_id: str,
    payload: RoomAssignmentRequest,
    session: SchedulingSession = Depends(get_scheduling_session),
) -> RoomAssignment:
    return _service(session).assign_manually(entry_id, payload.room_id, payload.assigned_by)


@router.delete("/{session_id}/entries/{entry_id}/room", status_code=status.HTTP_204_NO_CONTENT)
def unassign_room(entry_id: str, session: SchedulingSession = Depends(get_scheduling_session)) -> Response:
    _service(session).unassign(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{session_id}/room-assignments", response_model=list[RoomAssignment])
def list_room_assignments(session: SchedulingSession = Depends(get_scheduling_session)) -> list[RoomAssignment]:
    return list(session.room_assignments.values())


@router.get("/{session_id}/room-conflicts", response_model=list[RoomConflict])
def room_conflicts(session: SchedulingSession = Depends(get_scheduling_session)) -> list[RoomConflict]:
    return session.room_conflicts


@router.get("/{session_id}/room-utilization", response_model=list[RoomUtilization])
def room_utilization(session: SchedulingSession = Depends(get_scheduling_session)) -> list[RoomUtilization]:
    return _service(session).utilization()
