from __future__ import annotations

import os

import pytest

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from gridsheet.settings import AppSettings  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    from PySide6 import QtWidgets

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    return app


@pytest.fixture
def app_settings(tmp_path) -> AppSettings:
    return AppSettings(tmp_path / "settings.json")
