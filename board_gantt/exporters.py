"""Export helpers for CSV and PDF."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import Qt, QRectF
from PyQt6.QtGui import QColor, QFont, QPageLayout, QPageSize, QPainter, QPen, QPdfWriter

from .models import WEEKDAY_LABELS, Placement, Priority, ScheduleResult, WeeklyCalendar

CSV_HEADERS = ["Task", "Priority", "Start", "Duration"]
CSV_ACTIVE_MARKER = "X"

PDF_TASK_MIN_WIDTH = 160
PDF_TASK_MAX_WIDTH_RATIO = 0.35  # fraction of available width
PDF_TASK_PADDING = 48
PDF_PAGE_MARGIN_RATIO = 0.04
PDF_HEADER_HEIGHT = 40
PDF_ROW_HEIGHT_MIN = 24
PDF_ROW_HEIGHT_MAX = 48
PDF_FONT_SIZE = 10
PDF_BAR_INSET = 4
PRIORITY_COLORS = {
    Priority.HIGH: QColor("#d32f2f"),
    Priority.MEDIUM: QColor("#f9a825"),
    Priority.LOW: QColor("#1976d2"),
}
PDF_OFF_DAY_COLOR = QColor("#f5f5f5")


def day_labels(week_count: int) -> List[str]:
    """Column labels for every calendar day of the chart, e.g. ``W1 Mon``."""
    return [f"W{week + 1} {label}" for week in range(week_count) for label in WEEKDAY_LABELS]


def export_as_csv(path: Path | str, result: ScheduleResult) -> None:
    """Export the schedule as a day grid, one marker per day a bar touches."""
    _require_ok(result)
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    header = CSV_HEADERS + day_labels(result.week_count)
    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(header)
        for placement in result.placements:
            row = [
                placement.task.title,
                placement.task.priority_level.label,
                f"{placement.start_day:.2f}",
                f"{placement.duration:.2f}",
            ]
            markers = [
                CSV_ACTIVE_MARKER if placement.covers_day(day) else ""
                for day in range(result.total_days)
            ]
            writer.writerow(row + markers)


def export_as_pdf(
    path: Path | str,
    result: ScheduleResult,
    *,
    calendar: Optional[WeeklyCalendar] = None,
) -> None:
    """Render the Gantt chart to a landscape PDF page."""
    _require_ok(result)
    pdf_path = Path(path)
    pdf_path.parent.mkdir(parents=True, exist_ok=True)

    writer = QPdfWriter(str(pdf_path))
    writer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
    writer.setPageOrientation(QPageLayout.Orientation.Landscape)
    writer.setResolution(300)

    painter = QPainter(writer)
    _draw_pdf_chart(painter, writer, result, calendar)
    painter.end()


def _require_ok(result: ScheduleResult) -> None:
    if not result.ok:
        raise ValueError(f"Cannot export a failed schedule: {result.error}")


def _compute_task_width(font_metrics, content_rect, placements: List[Placement]) -> int:
    """Size the task column to the longest title, within bounds."""
    longest = max((font_metrics.horizontalAdvance(p.task.title) for p in placements), default=0)
    proportional_cap = int(content_rect.width() * PDF_TASK_MAX_WIDTH_RATIO)
    return max(PDF_TASK_MIN_WIDTH, min(longest + PDF_TASK_PADDING, proportional_cap))


def _compute_row_height(content_rect, placements: List[Placement]) -> int:
    """Compute a bounded row height so all tasks fit on the page."""
    rows = max(1, len(placements))
    available_height = max(PDF_ROW_HEIGHT_MIN, content_rect.height() - PDF_HEADER_HEIGHT)
    return max(PDF_ROW_HEIGHT_MIN, min(PDF_ROW_HEIGHT_MAX, int(available_height / rows)))


def _draw_pdf_chart(
    painter: QPainter,
    writer: QPdfWriter,
    result: ScheduleResult,
    calendar: Optional[WeeklyCalendar],
) -> None:
    page_rect = writer.pageLayout().paintRectPixels(writer.resolution())
    margin = int(page_rect.width() * PDF_PAGE_MARGIN_RATIO)
    content_rect = page_rect.adjusted(margin, margin, -margin, -margin)

    painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
    font = QFont(painter.font())
    font.setPointSize(PDF_FONT_SIZE)
    painter.setFont(font)
    pen = QPen(QColor("#333333"))
    pen.setWidth(1)
    painter.setPen(pen)

    placements = result.placements
    task_width = _compute_task_width(painter.fontMetrics(), content_rect, placements)
    row_height = _compute_row_height(content_rect, placements)
    timeline_x = content_rect.left() + task_width
    timeline_width = max(1, content_rect.width() - task_width)
    header_y = content_rect.top()

    header_rect = QRectF(content_rect.left(), header_y, task_width, PDF_HEADER_HEIGHT)
    painter.fillRect(header_rect, QColor("#eceff1"))
    painter.drawRect(header_rect)
    painter.drawText(header_rect, Qt.AlignmentFlag.AlignCenter, "Task")

    if not placements:
        rect = QRectF(content_rect.left(), header_y + PDF_HEADER_HEIGHT, content_rect.width(), row_height)
        painter.drawRect(rect)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, "No tasks scheduled")
        return

    # Day columns, shading days the calendar leaves empty
    day_width = timeline_width / result.total_days
    body_height = row_height * len(placements)
    for day in range(result.total_days):
        x = timeline_x + day * day_width
        if calendar is not None and not calendar.is_working_day(day):
            painter.fillRect(QRectF(x, header_y + PDF_HEADER_HEIGHT, day_width, body_height), PDF_OFF_DAY_COLOR)
        rect = QRectF(x, header_y, day_width, PDF_HEADER_HEIGHT)
        painter.fillRect(rect, QColor("#e8eaf6"))
        painter.drawRect(rect)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, WEEKDAY_LABELS[day % 7][0])

    current_y = header_y + PDF_HEADER_HEIGHT
    for placement in placements:
        name_rect = QRectF(content_rect.left(), current_y, task_width, row_height)
        painter.drawRect(name_rect)
        painter.drawText(
            name_rect.adjusted(6, 0, -6, 0),
            Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft,
            placement.task.title,
        )
        painter.drawRect(QRectF(timeline_x, current_y, timeline_width, row_height))

        bar = QRectF(
            timeline_x + timeline_width * placement.start_percent / 100,
            current_y + PDF_BAR_INSET,
            timeline_width * placement.width_percent / 100,
            row_height - 2 * PDF_BAR_INSET,
        )
        painter.fillRect(bar, PRIORITY_COLORS[placement.task.priority_level])
        current_y += row_height
