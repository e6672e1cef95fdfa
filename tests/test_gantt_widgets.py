from pathlib import Path

from PyQt6.QtWidgets import QApplication

from board_gantt import app as gantt_app
from board_gantt.app import GanttChartWidget, MainWindow, TaskTableWidget, WorkHoursDialog
from board_gantt.models import BoardTask, WeeklyCalendar
from board_gantt.scheduler import schedule


def test_task_table_roundtrip_and_undo(qapp: QApplication) -> None:
    table = TaskTableWidget()
    tasks = [
        BoardTask(title="Idea"),
        BoardTask(title="Spec", effort=3, priority="High", column="To do"),
    ]
    table.set_tasks(tasks)

    assert table.get_tasks() == tasks
    assert table.rowCount() == 3

    table.delete_row(0)
    assert [t.title for t in table.get_tasks()] == ["Spec"]

    assert table.undo_last_change()
    assert table.get_tasks() == tasks
    assert not table.undo_last_change()


def test_work_hours_dialog_clamps_and_totals(qapp: QApplication) -> None:
    dialog = WorkHoursDialog(WeeklyCalendar.default())

    dialog.spin_boxes["saturday"].setValue(30)

    calendar = dialog.calendar()
    assert calendar.hours["saturday"] == 24
    assert calendar.total_weekly_hours() == 64
    assert dialog.total_label.text() == "64 h"


def test_chart_colors_only_covered_days(qapp: QApplication) -> None:
    calendar = WeeklyCalendar.from_mapping({"wednesday": 8})
    result = schedule([BoardTask(title="Design", effort=6, priority="Medium")], calendar)
    chart = GanttChartWidget()

    chart.show_result(result, calendar)

    assert chart.rowCount() == 1
    assert chart.columnCount() == chart.timeline_start_col + 7
    assert chart.item(0, 0).text() == "Design"
    assert chart.item(0, 1).text() == "Medium"
    filled = [day for day in range(7) if chart.is_day_filled(0, day)]
    assert filled == [2]


def test_task_table_keeps_untitled_rows_with_data(qapp: QApplication) -> None:
    table = TaskTableWidget()

    table.item(table.blank_row_index, 1).setText("5")

    assert table.rowCount() == 2
    assert table.get_tasks() == [BoardTask(title="", effort=5)]


def test_export_failure_is_reported(qapp: QApplication, tmp_path: Path, monkeypatch) -> None:
    messages = []
    monkeypatch.setattr(gantt_app.QMessageBox, "critical", lambda *args: messages.append(args[1:]))
    window = MainWindow()
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    result = schedule([BoardTask(title="A", effort=2)], window.calendar)

    assert not window.export_to(str(blocker / "chart.csv"), result, as_pdf=False)
    assert messages and messages[0][0] == "Export failed"

    assert window.export_to(str(tmp_path / "chart.csv"), result, as_pdf=False)
    assert (tmp_path / "chart.csv").exists()
