from __future__ import annotations

from pydantic import BaseModel, Field


class TeachingAssignmentCreate(BaseModel):
    class_id: str = Field(min_length=1)
    subject_id: str = Field(min_length=1)
    teacher_id: str = Field(min_length=1)


class AllocationUpdate(BaseModel):
    grade_id: str = Field(min_length=1)
    subject_id: str = Field(min_length=1)
    weekly_hours: float = Field(ge=0, le=40)
    semester_weeks: int = Field(default=18, ge=1, le=52)


class SubjectWorkload(BaseModel):
    subject_id: str
    subject_name: str
    class_count: int
    estimated_weekly_hours: float


class TeacherWorkload(BaseModel):
    teacher_id: str
    teacher_name: str
    total_classes: int
    total_weekly_hours: float
    weekly_hour_limit: float
    utilization_percentage: int
    current_weekly_hours: float
    subjects: list[SubjectWorkload] = Field(default_factory=list)
