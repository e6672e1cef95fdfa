"""Work-calendar scheduler behind the Gantt chart.

Tasks are laid end to end on a single timeline measured in working hours.
Each hour offset is then mapped onto calendar days by walking the weekly
pattern, so days without working hours are skipped entirely.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, List, Mapping, Sequence, Union

from .models import BoardTask, Placement, ScheduleResult, WeeklyCalendar

logger = logging.getLogger(__name__)

MIN_DURATION_DAYS = 0.1
FIRST_DAY_SCAN_LIMIT = 365
DAY_SCAN_LIMIT = 3650


class SchedulingError(Exception):
    """Base class for errors reported by :func:`schedule`."""


class NoWorkingHoursError(SchedulingError):
    """Raised (or returned) when the weekly calendar has no hours at all."""

    def __init__(self, message: str = "Configure at least some working hours per week.") -> None:
        super().__init__(message)


def _sort_key(task: BoardTask):
    return (-task.priority_level, task.title)


def day_offset_for_hours(target_hours: float, hours_per_day: Sequence[float]) -> float:
    """Convert cumulative working hours into a fractional calendar-day offset."""
    if target_hours <= 0:
        day = 0
        while hours_per_day[day % 7] == 0 and day < FIRST_DAY_SCAN_LIMIT:
            day += 1
        return day

    accumulated = 0.0
    day = 0
    while day < DAY_SCAN_LIMIT:
        today = hours_per_day[day % 7]
        if today == 0:
            day += 1
            continue
        if accumulated + today > target_hours:
            return day + (target_hours - accumulated) / today
        accumulated += today
        day += 1
        if accumulated == target_hours:
            # Ending exactly on a boundary lands on the next working day.
            while hours_per_day[day % 7] == 0 and day < DAY_SCAN_LIMIT:
                day += 1
            return day
    return day


def schedule(
    tasks: Iterable[BoardTask],
    calendar: Union[WeeklyCalendar, Mapping[str, float]],
) -> ScheduleResult:
    """Place every task on the weekly calendar, highest priority first."""
    if not isinstance(calendar, WeeklyCalendar):
        calendar = WeeklyCalendar.from_mapping(calendar)
    hours_per_day = calendar.hours_per_day()

    if sum(hours_per_day) == 0:
        logger.warning("Cannot schedule: the weekly calendar has no working hours")
        return ScheduleResult(error=NoWorkingHoursError())

    ordered = sorted(tasks, key=_sort_key)
    if not ordered:
        return ScheduleResult()

    placements: List[Placement] = []
    cursor = 0.0
    for task in ordered:
        start_hour = cursor
        end_hour = start_hour + task.effective_effort()
        start_day = day_offset_for_hours(start_hour, hours_per_day)
        end_day = day_offset_for_hours(end_hour, hours_per_day)
        placements.append(
            Placement(task=task, start_day=start_day, duration=max(MIN_DURATION_DAYS, end_day - start_day))
        )
        cursor = end_hour

    max_day = max(p.end_day for p in placements)
    week_count = max(1, math.ceil(max_day / 7))
    total_days = week_count * 7
    for placement in placements:
        placement.start_percent = placement.start_day / total_days * 100
        placement.width_percent = placement.duration / total_days * 100

    logger.debug("Scheduled %d tasks over %d weeks (%.1f hours)", len(placements), week_count, cursor)
    return ScheduleResult(placements=placements, week_count=week_count)
