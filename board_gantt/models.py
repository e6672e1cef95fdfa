"""Data models shared across the board Gantt application."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional

if TYPE_CHECKING:
    from .scheduler import SchedulingError


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

MAX_DAILY_HOURS = 24.0
MIN_EFFORT_HOURS = 0.5
DEFAULT_WORK_HOURS = {
    "monday": 8.0,
    "tuesday": 8.0,
    "wednesday": 8.0,
    "thursday": 8.0,
    "friday": 8.0,
    "saturday": 0.0,
    "sunday": 0.0,
}


class Priority(IntEnum):
    """Task priority, ordered so that larger values are scheduled first."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Priority":
        """Map a board priority label (exactly "High", "Medium" or "Low") to a level.

        Anything else, including differently cased labels, is Low.
        """
        for level in cls:
            if level.label == label:
                return level
        return cls.LOW


def clamp_hours(value) -> float:
    """Coerce a raw hour value into [0, 24]."""
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(hours) or hours < 0:
        return 0.0
    return min(hours, MAX_DAILY_HOURS)


@dataclass
class WeeklyCalendar:
    """Available work hours for each weekday."""

    hours: Dict[str, float] = field(default_factory=lambda: {day: 0.0 for day in WEEKDAYS})

    def __post_init__(self) -> None:
        self.hours = {day: clamp_hours(self.hours.get(day, 0.0)) for day in WEEKDAYS}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, float]) -> "WeeklyCalendar":
        return cls(hours={day: mapping.get(day, 0.0) for day in WEEKDAYS})

    @classmethod
    def default(cls) -> "WeeklyCalendar":
        return cls.from_mapping(DEFAULT_WORK_HOURS)

    def set_hours(self, day: str, hours: float) -> None:
        if day not in self.hours:
            raise KeyError(f"Unknown weekday: {day}")
        self.hours[day] = clamp_hours(hours)

    def hours_per_day(self) -> List[float]:
        """Return the clamped hours as a list indexed 0=Monday..6=Sunday."""
        return [clamp_hours(self.hours.get(day, 0.0)) for day in WEEKDAYS]

    def total_weekly_hours(self) -> float:
        return sum(self.hours_per_day())

    def is_working_day(self, day_index: int) -> bool:
        return self.hours_per_day()[day_index % 7] > 0


@dataclass
class BoardTask:
    """A single card on the board, as seen by the scheduler."""

    title: str
    effort: Optional[float] = None
    priority: Optional[str] = None
    column: str = ""

    @property
    def priority_level(self) -> Priority:
        return Priority.from_label(self.priority)

    def effective_effort(self) -> float:
        """Effort used for placement; empty estimates still get a visible slot."""
        if self.effort is not None and self.effort > 0:
            return float(self.effort)
        return MIN_EFFORT_HOURS

    def is_empty(self) -> bool:
        return not self.title and self.effort is None and not self.priority


@dataclass
class Column:
    name: str
    tasks: List[BoardTask] = field(default_factory=list)


def flatten_columns(columns: Iterable[Column]) -> List[BoardTask]:
    """Collect every task on the board, in column order."""
    return [task for column in columns for task in column.tasks]


@dataclass
class Placement:
    """Position of one task on the chart, in fractional calendar days."""

    task: BoardTask
    start_day: float
    duration: float
    start_percent: float = 0.0
    width_percent: float = 0.0

    @property
    def end_day(self) -> float:
        return self.start_day + self.duration

    def covers_day(self, day_index: int) -> bool:
        """Return True when the bar overlaps the calendar day ``day_index``."""
        return self.start_day < day_index + 1 and self.end_day > day_index


@dataclass
class ScheduleResult:
    """Outcome of a scheduling run: either placements or an error, never both."""

    placements: List[Placement] = field(default_factory=list)
    week_count: int = 0
    error: Optional["SchedulingError"] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def weeks(self) -> range:
        return range(self.week_count)

    @property
    def total_days(self) -> int:
        return self.week_count * 7

    def total_effort(self) -> float:
        """Sum of the stored estimates (absent estimates count as zero)."""
        return sum(p.task.effort or 0.0 for p in self.placements)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error
