from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from timetabler.schemas.grid import GridConfig
from timetabler.schemas.reference import ReferenceData


class SessionCreate(BaseModel):
    reference: ReferenceData
    grid: GridConfig | None = None


class SessionOut(BaseModel):
    id: str
    created_at: datetime
    grid: GridConfig
    entry_count: int
    room_assignment_count: int
    conflict_count: int
    room_conflict_count: int
    publishable: bool
