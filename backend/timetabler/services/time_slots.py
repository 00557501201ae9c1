from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from timetabler.core.config import Settings
from timetabler.schemas.grid import BreakConfig, DayConfig, GridConfig, format_minutes, parse_time_to_minutes
from timetabler.schemas.reference import TimeSlot


def generate_time_slots(
    day_configs: Iterable[DayConfig],
    period_minutes: int,
    breaks: Iterable[BreakConfig] = (),
) -> list[TimeSlot]:
    breaks_by_day: dict[str, list[BreakConfig]] = defaultdict(list)
    for item in breaks:
        breaks_by_day[item.day].append(item)

    slots: list[TimeSlot] = []
    slot_id = 1
    for config in day_configs:
        if not config.enabled or config.periods == 0:
            continue
        current = parse_time_to_minutes(config.start_time)
        for period in range(1, config.periods + 1):
            end = current + period_minutes
            if end >= 24 * 60:
                raise ValueError(f"Period {period} on {config.day} runs past midnight")
            slots.append(
                TimeSlot(
                    id=str(slot_id),
                    day=config.day,
                    period=period,
                    start_time=format_minutes(current),
                    end_time=format_minutes(end),
                )
            )
            current = end
            for item in breaks_by_day[config.day]:
                if item.after_period == period:
                    current += item.minutes
            slot_id += 1
    return slots


def default_time_slots(grid: GridConfig, settings: Settings) -> list[TimeSlot]:
    day_configs = [
        DayConfig(day=day, periods=grid.periods_per_day, start_time=settings.day_start_time)
        for day in grid.days
    ]
    breaks = []
    if 0 < settings.lunch_after_period < grid.periods_per_day and settings.lunch_minutes > 0:
        breaks = [
            BreakConfig(day=day, after_period=settings.lunch_after_period, minutes=settings.lunch_minutes, kind="lunch")
            for day in grid.days
        ]
    return generate_time_slots(day_configs, grid.period_minutes, breaks)
