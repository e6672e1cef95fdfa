import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """Shared QApplication for widget and PDF export tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(["board-gantt-tests"])
    return app
