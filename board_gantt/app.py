"""Main PyQt application entry point."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import Qt, QPoint, pyqtSignal
from PyQt6.QtGui import QAction, QCloseEvent, QColor, QKeySequence
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFileDialog,
    QFormLayout,
    QHeaderView,
    QLabel,
    QMainWindow,
    QMenu,
    QMessageBox,
    QSplitter,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from .exporters import PRIORITY_COLORS, day_labels, export_as_csv, export_as_pdf
from .models import (
    MAX_DAILY_HOURS,
    WEEKDAY_LABELS,
    WEEKDAYS,
    BoardTask,
    ScheduleResult,
    WeeklyCalendar,
)
from .scheduler import schedule
from .storage import load_board, save_board

logger = logging.getLogger(__name__)

TASK_HEADERS = ["Title", "Effort (h)", "Priority", "Column"]
CHART_HEADERS = ["Task", "Priority", "Effort (h)"]
_UNDO_STACK_LIMIT = 20
_OFF_DAY_COLOR = QColor("#eeeeee")


class TaskTableWidget(QTableWidget):
    """Editable list of board tasks.

    Like a spreadsheet, the table keeps a trailing blank row for new entries
    and emits `tasks_updated` whenever the task list changes.
    """

    tasks_updated = pyqtSignal(list)
    undo_available = pyqtSignal(bool)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(0, len(TASK_HEADERS), parent)
        self.blank_row_index = 0
        self._block_cell = False
        self._undo_stack: List[List[BoardTask]] = []
        self.setHorizontalHeaderLabels(TASK_HEADERS)
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.customContextMenuRequested.connect(self._show_context_menu)
        self.cellChanged.connect(self._handle_cell_changed)
        self.verticalHeader().setVisible(False)
        self.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        self._append_blank_row()
        self._emit_undo_available()

    # --- Row lifecycle helpers -------------------------------------------------

    def _append_blank_row(self) -> None:
        blocked = self._block_cell
        self._block_cell = True
        row = self.rowCount()
        self.insertRow(row)
        self.blank_row_index = row
        for col in range(self.columnCount()):
            self.setItem(row, col, QTableWidgetItem(""))
        self._block_cell = blocked

    def _row_has_data(self, row: int) -> bool:
        if row < 0 or row >= self.rowCount():
            return False
        for col in range(self.columnCount()):
            item = self.item(row, col)
            if item and item.text().strip():
                return True
        return False

    def _show_context_menu(self, position: QPoint) -> None:
        index = self.indexAt(position)
        if not index.isValid() or index.row() == self.blank_row_index:
            return
        menu = QMenu(self)
        delete_action = menu.addAction("Delete task")
        menu.addSeparator()
        undo_action = menu.addAction("Undo delete")
        undo_action.setEnabled(bool(self._undo_stack))
        action = menu.exec(self.viewport().mapToGlobal(position))
        if action == delete_action:
            self.delete_row(index.row())
        elif action == undo_action:
            self.undo_last_change()

    def delete_row(self, row: int) -> None:
        if row == self.blank_row_index or row < 0 or row >= self.rowCount():
            return
        self._push_undo_state()
        self.removeRow(row)
        self.blank_row_index = self.rowCount() - 1
        self.tasks_updated.emit(self.get_tasks())

    def _handle_cell_changed(self, row: int, column: int) -> None:
        if self._block_cell:
            return
        if row == self.blank_row_index:
            if not self._row_has_data(row):
                return
            self._append_blank_row()
        self.tasks_updated.emit(self.get_tasks())

    def _read_text(self, row: int, col: int) -> str:
        item = self.item(row, col)
        return item.text().strip() if item else ""

    def _read_effort(self, row: int) -> Optional[float]:
        text = self._read_text(row, 1)
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None

    def get_tasks(self) -> List[BoardTask]:
        tasks: List[BoardTask] = []
        for row in range(self.rowCount()):
            if row == self.blank_row_index or not self._row_has_data(row):
                continue
            tasks.append(
                BoardTask(
                    title=self._read_text(row, 0),
                    effort=self._read_effort(row),
                    priority=self._read_text(row, 2) or None,
                    column=self._read_text(row, 3),
                )
            )
        return tasks

    def set_tasks(self, tasks: List[BoardTask]) -> None:
        self._block_cell = True
        self.setRowCount(0)
        for task in tasks:
            row = self.rowCount()
            self.insertRow(row)
            values = [
                task.title,
                "" if task.effort is None else f"{task.effort:g}",
                task.priority or "",
                task.column,
            ]
            for col, value in enumerate(values):
                self.setItem(row, col, QTableWidgetItem(value))
        self._append_blank_row()
        self._block_cell = False
        self.tasks_updated.emit(self.get_tasks())

    def reset_undo_stack(self) -> None:
        """Drop all undo history (used after opening a new board)."""
        self._undo_stack.clear()
        self._emit_undo_available()

    def undo_last_change(self) -> bool:
        if not self._undo_stack:
            return False
        snapshot = self._undo_stack.pop()
        self.set_tasks(snapshot)
        self._emit_undo_available()
        return True

    def _push_undo_state(self) -> None:
        """Remember the current tasks, trimming the fixed-size undo buffer."""
        self._undo_stack.append(self.get_tasks())
        if len(self._undo_stack) > _UNDO_STACK_LIMIT:
            self._undo_stack.pop(0)
        self._emit_undo_available()

    def _emit_undo_available(self) -> None:
        self.undo_available.emit(bool(self._undo_stack))


class WorkHoursDialog(QDialog):
    """Edit the available hours for every weekday."""

    def __init__(self, calendar: WeeklyCalendar, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Work hours")
        self.spin_boxes = {}
        layout = QFormLayout(self)
        for day, label in zip(WEEKDAYS, WEEKDAY_LABELS):
            spin = QDoubleSpinBox(self)
            spin.setRange(0.0, MAX_DAILY_HOURS)
            spin.setSingleStep(0.5)
            spin.setValue(calendar.hours[day])
            spin.valueChanged.connect(self._update_total)
            self.spin_boxes[day] = spin
            layout.addRow(label, spin)
        self.total_label = QLabel(self)
        layout.addRow("Total per week", self.total_label)
        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel, parent=self
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)
        self._update_total()

    def calendar(self) -> WeeklyCalendar:
        return WeeklyCalendar.from_mapping({day: spin.value() for day, spin in self.spin_boxes.items()})

    def _update_total(self) -> None:
        self.total_label.setText(f"{self.calendar().total_weekly_hours():g} h")


class GanttChartWidget(QTableWidget):
    """Read-only chart: one row per placement, one column per calendar day."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(0, len(CHART_HEADERS), parent)
        self.timeline_start_col = len(CHART_HEADERS)
        self.result = ScheduleResult()
        self.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self.verticalHeader().setVisible(False)
        self.setHorizontalHeaderLabels(CHART_HEADERS)

    def show_result(self, result: ScheduleResult, calendar: WeeklyCalendar) -> None:
        """Redraw the chart from a successful scheduling run."""
        if not result.ok:
            raise ValueError(str(result.error))
        self.result = result
        self.clear()
        labels = CHART_HEADERS + day_labels(result.week_count)
        self.setColumnCount(len(labels))
        self.setHorizontalHeaderLabels(labels)
        self.setRowCount(len(result.placements))
        for col in range(self.timeline_start_col, self.columnCount()):
            self.setColumnWidth(col, 28)

        for row, placement in enumerate(result.placements):
            task = placement.task
            values = [task.title, task.priority_level.label, "" if task.effort is None else f"{task.effort:g}"]
            for col, value in enumerate(values):
                self.setItem(row, col, QTableWidgetItem(value))
            color = PRIORITY_COLORS[task.priority_level]
            for day in range(result.total_days):
                item = QTableWidgetItem("")
                if placement.covers_day(day):
                    item.setBackground(color)
                elif not calendar.is_working_day(day):
                    item.setBackground(_OFF_DAY_COLOR)
                self.setItem(row, self.timeline_start_col + day, item)

    def is_day_filled(self, row: int, day: int) -> bool:
        item = self.item(row, self.timeline_start_col + day)
        if item is None or item.background().style() == Qt.BrushStyle.NoBrush:
            return False
        return item.background().color() != _OFF_DAY_COLOR


class MainWindow(QMainWindow):
    """Primary window with menus, the task table and the chart."""

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Board Gantt")
        self.current_path: Optional[Path] = None
        self.calendar = WeeklyCalendar.default()
        self.table = TaskTableWidget()
        self.chart = GanttChartWidget()
        self.undo_action: QAction | None = None
        self.table.undo_available.connect(self._handle_undo_available)
        self._build_layout()
        self._build_menu()
        self.resize(1200, 700)

    def _build_layout(self) -> None:
        container = QWidget()
        layout = QVBoxLayout(container)
        splitter = QSplitter(Qt.Orientation.Vertical, container)
        splitter.addWidget(self.table)
        splitter.addWidget(self.chart)
        layout.addWidget(splitter)
        self.setCentralWidget(container)

    def _build_menu(self) -> None:
        """Create File/Edit/Schedule menus along with shortcuts."""
        menu = self.menuBar()
        file_menu = menu.addMenu("File")
        for title, handler in (
            ("New", self.action_new),
            ("Open", self.action_open),
            ("Save", self.action_save),
            ("Export", self.action_export),
        ):
            action = QAction(title, self)
            action.triggered.connect(handler)
            file_menu.addAction(action)
        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        edit_menu = menu.addMenu("Edit")
        undo_action = QAction("Undo delete", self)
        undo_action.setShortcut("Ctrl+Z")
        undo_action.setEnabled(False)
        undo_action.triggered.connect(self.table.undo_last_change)
        edit_menu.addAction(undo_action)
        self.undo_action = undo_action

        schedule_menu = menu.addMenu("Schedule")
        hours_action = QAction("Work hours...", self)
        hours_action.triggered.connect(self.action_work_hours)
        schedule_menu.addAction(hours_action)
        generate_action = QAction("Generate chart", self)
        generate_action.setShortcut("F5")
        generate_action.triggered.connect(self.action_generate)
        schedule_menu.addAction(generate_action)

    # Menu actions ------------------------------------------------------
    def action_new(self) -> None:
        self.table.set_tasks([])
        self.table.reset_undo_stack()
        self.chart.show_result(ScheduleResult(), self.calendar)
        self.current_path = None
        self.statusBar().showMessage("Started new board", 3000)

    def action_open(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open board", filter="CSV Files (*.csv)")
        if not path:
            return
        try:
            calendar, tasks = load_board(path)
        except (OSError, ValueError) as exc:  # pragma: no cover - interactive guard
            logger.exception("Failed to open %s", path)
            QMessageBox.critical(self, "Open failed", str(exc))
            return
        self.calendar = calendar
        self.table.set_tasks(tasks)
        self.table.reset_undo_stack()
        self.current_path = Path(path)
        self.statusBar().showMessage(f"Loaded board from {path}", 3000)

    def action_save(self) -> None:
        if not self.current_path:
            path, _ = QFileDialog.getSaveFileName(self, "Save board", filter="CSV Files (*.csv)")
            if not path:
                return
            self.current_path = Path(path)
        save_board(self.current_path, self.calendar, self.table.get_tasks())
        self.statusBar().showMessage(f"Saved to {self.current_path}", 3000)

    def action_work_hours(self) -> None:
        dialog = WorkHoursDialog(self.calendar, self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self.calendar = dialog.calendar()

    def action_generate(self) -> Optional[ScheduleResult]:
        """Schedule the current tasks and redraw the chart."""
        result = schedule(self.table.get_tasks(), self.calendar)
        if not result.ok:
            QMessageBox.warning(self, "Cannot build chart", str(result.error))
            return None
        self.chart.show_result(result, self.calendar)
        self.statusBar().showMessage(
            f"{len(result.placements)} tasks, {result.total_effort():g} h over {result.week_count} week(s)"
        )
        return result

    def action_export(self) -> None:
        """Export the current chart as CSV or PDF."""
        result = schedule(self.table.get_tasks(), self.calendar)
        if not result.ok:
            QMessageBox.warning(self, "Cannot export", str(result.error))
            return
        path, selected_filter = QFileDialog.getSaveFileName(
            self,
            "Export chart",
            filter="CSV Files (*.csv);;PDF Files (*.pdf)",
        )
        if not path:
            return
        self.export_to(path, result, as_pdf=path.lower().endswith(".pdf") or "PDF" in selected_filter)

    def export_to(self, path: str, result: ScheduleResult, *, as_pdf: bool) -> bool:
        """Write the chart to ``path``, reporting failures in a message box."""
        try:
            if as_pdf:
                export_as_pdf(path, result, calendar=self.calendar)
            else:
                export_as_csv(path, result)
        except (OSError, ValueError) as exc:
            logger.exception("Failed to export %s", path)
            QMessageBox.critical(self, "Export failed", str(exc))
            return False
        self.statusBar().showMessage(f"Exported {'PDF' if as_pdf else 'CSV'} to {path}", 3000)
        return True

    def _handle_undo_available(self, available: bool) -> None:
        if self.undo_action is not None:
            self.undo_action.setEnabled(available)

    def closeEvent(self, event: QCloseEvent) -> None:  # pragma: no cover - requires UI
        if QMessageBox.question(self, "Quit", "Close Board Gantt?") == QMessageBox.StandardButton.Yes:
            event.accept()
        else:
            event.ignore()


def run() -> None:
    """Entry point used by the `board-gantt` script."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    app.exec()


if __name__ == "__main__":
    run()
