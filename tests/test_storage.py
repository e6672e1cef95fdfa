from pathlib import Path

import pytest

from board_gantt.models import BoardTask, WeeklyCalendar
from board_gantt.storage import load_board, save_board


def test_save_and_load_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "board.csv"
    calendar = WeeklyCalendar.from_mapping({"monday": 8, "tuesday": 6.5, "saturday": 2})
    tasks = [
        BoardTask(title="Write docs", effort=4, priority="High", column="To do"),
        BoardTask(title="Review", effort=1.5, priority="Medium", column="Doing"),
    ]

    save_board(path, calendar, tasks)
    loaded_calendar, loaded = load_board(path)

    assert loaded_calendar == calendar
    assert loaded == tasks


def test_save_board_writes_blank_cells_for_missing_values(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "draft.csv"
    tasks = [
        BoardTask(title="Notes"),
        BoardTask(title="Rough", effort=2, column="Backlog"),
    ]

    save_board(path, WeeklyCalendar.default(), tasks)

    text = path.read_text(encoding="utf-8").splitlines()
    assert text[0] == "#hours,8,8,8,8,8,0,0"
    assert text[1] == "title,effort,priority,column"
    assert text[2] == "Notes,,,"
    assert text[3] == "Rough,2,,Backlog"


def test_load_board_skips_blank_and_short_rows(tmp_path: Path) -> None:
    path = tmp_path / "messy.csv"
    path.write_text(
        "#hours,8,8,8,8,8,0,0\n"
        "title,effort,priority,column\n"
        ",,,\n"
        "short,1\n"
        "Estimate later,soon,Low,To do\n",
        encoding="utf-8",
    )

    _, tasks = load_board(path)

    assert tasks == [BoardTask(title="Estimate later", effort=None, priority="Low", column="To do")]


def test_load_board_clamps_stored_hours(tmp_path: Path) -> None:
    path = tmp_path / "hours.csv"
    path.write_text("#hours,30,-1,8,8,8,0,0\ntitle,effort,priority,column\n", encoding="utf-8")

    calendar, tasks = load_board(path)

    assert calendar.hours_per_day() == [24, 0, 8, 8, 8, 0, 0]
    assert tasks == []


@pytest.mark.parametrize(
    "content",
    [
        "title,effort,priority,column\n",
        "#hours,8,8,8\ntitle,effort,priority,column\n",
        "#hours,8,8,8,8,8,0,0\nname,start,end\n",
    ],
)
def test_load_board_rejects_malformed_files(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bad.csv"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        load_board(path)
