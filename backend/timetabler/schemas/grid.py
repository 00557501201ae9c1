from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator

DAY_VALUES = {
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
}

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(total_minutes: int) -> str:
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def validate_day_name(value: str) -> str:
    day = value.strip()
    if day not in DAY_VALUES:
        raise ValueError("Invalid day value")
    return day


class DayConfig(BaseModel):
    day: str
    periods: int = Field(ge=0, le=16)
    start_time: str = "08:00"
    enabled: bool = True

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return validate_day_name(value)

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value


class BreakConfig(BaseModel):
    day: str
    after_period: int = Field(ge=1)
    minutes: int = Field(ge=1, le=240)
    kind: str = "break"

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return validate_day_name(value)


class GridConfig(BaseModel):
    """Weekly day x period grid a session schedules into."""

    days: list[str] = Field(min_length=1, max_length=7)
    periods_per_day: int = Field(ge=1, le=16)
    period_minutes: int = Field(ge=5, le=180)

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[str]) -> list[str]:
        cleaned = [validate_day_name(day) for day in value]
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("Duplicate day entries")
        return cleaned

    @model_validator(mode="after")
    def validate_grid(self) -> "GridConfig":
        if self.periods_per_day * self.period_minutes > 24 * 60:
            raise ValueError("Periods do not fit into a single day")
        return self

    @property
    def total_slots(self) -> int:
        return len(self.days) * self.periods_per_day
