"""CSV persistence helpers for the board and its work calendar."""
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .models import WEEKDAYS, BoardTask, WeeklyCalendar

logger = logging.getLogger(__name__)

_HOURS_PREFIX = "#hours"
_TASK_HEADER = ["title", "effort", "priority", "column"]


def save_board(path: Path | str, calendar: WeeklyCalendar, tasks: Iterable[BoardTask]) -> None:
    """Persist the work calendar and board tasks to CSV."""
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow([_HOURS_PREFIX] + [_format_number(h) for h in calendar.hours_per_day()])
        writer.writerow(_TASK_HEADER)
        for task in tasks:
            writer.writerow([
                task.title,
                _serialize_optional_float(task.effort),
                task.priority or "",
                task.column,
            ])


def load_board(path: Path | str) -> Tuple[WeeklyCalendar, List[BoardTask]]:
    """Load a work calendar and board tasks from CSV."""
    csv_path = Path(path)
    with csv_path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        hours_line = next(reader, None)
        if not hours_line or hours_line[0] != _HOURS_PREFIX:
            raise ValueError("Invalid board CSV: missing hours line")
        if len(hours_line) != len(WEEKDAYS) + 1:
            raise ValueError("Invalid board CSV: expected 7 daily hour values")
        calendar = WeeklyCalendar.from_mapping(dict(zip(WEEKDAYS, hours_line[1:])))

        header = next(reader, None)
        if header != _TASK_HEADER:
            raise ValueError("Invalid board CSV: missing task header")

        tasks: List[BoardTask] = []
        for row in reader:
            if len(row) < 4:
                continue
            title, effort_raw, priority, column = row[:4]
            task = BoardTask(
                title=title,
                effort=_parse_optional_float(effort_raw),
                priority=priority.strip() or None,
                column=column,
            )
            if task.is_empty():
                continue
            tasks.append(task)

    logger.info("Loaded %d tasks from %s", len(tasks), csv_path)
    return calendar, tasks


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _serialize_optional_float(value: Optional[float]) -> str:
    return "" if value is None else _format_number(value)


def _parse_optional_float(value: str) -> Optional[float]:
    text = value.strip() if value is not None else ""
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None
