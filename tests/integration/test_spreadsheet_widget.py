from __future__ import annotations

import pytest
from PySide6 import QtCore, QtGui, QtWidgets
from PySide6.QtCore import Qt
from PySide6.QtTest import QTest

from gridsheet.app import GridSheetApp
from gridsheet.debounced_resize import DebouncedResizeWatcher
from gridsheet.formula_evaluator import CIRCULAR_REFERENCE
from gridsheet.sheet_session import SelectionState
from gridsheet.spreadsheet_widget import SpreadsheetWidget
from gridsheet.viewport import ViewportSize


@pytest.fixture
def widget(qapp, app_settings) -> SpreadsheetWidget:
    return SpreadsheetWidget(app_settings=app_settings)


def test_model_exposes_full_extent_and_headers(widget: SpreadsheetWidget) -> None:
    model = widget.model

    assert model.rowCount() == 10000
    assert model.columnCount() == 10000
    assert model.headerData(0, Qt.Horizontal) == "A"
    assert model.headerData(26, Qt.Horizontal) == "AA"
    assert model.headerData(0, Qt.Vertical) == "1"
    assert model.headerData(9999, Qt.Vertical) == "10000"


def test_display_and_edit_roles(widget: SpreadsheetWidget) -> None:
    widget.set_cell_value(0, 0, "5")
    widget.set_cell_value(0, 1, "=A1+A1")
    index = widget.model.index(0, 1)

    assert widget.model.data(index, Qt.DisplayRole) == "10"
    assert widget.model.data(index, Qt.EditRole) == "=A1+A1"
    assert widget.get_cell_value(0, 1) == 10


def test_circular_reference_is_displayed(widget: SpreadsheetWidget) -> None:
    widget.set_cell_value(0, 1, "=A1+B1")
    assert widget.model.data(widget.model.index(0, 1), Qt.DisplayRole) == CIRCULAR_REFERENCE


def test_formula_bar_enter_commits_and_moves_down(widget: SpreadsheetWidget) -> None:
    widget.set_cell_value(0, 0, "5")
    widget.select_cell(0, 2)

    widget.formula_bar.setText("=A1")
    widget.formula_bar.textEdited.emit("=A1")
    widget.formula_bar.returnPressed.emit()

    assert widget.session.selected == (1, 2)
    assert widget.session.state is SelectionState.SELECTED
    assert widget.model.data(widget.model.index(0, 2), Qt.DisplayRole) == "5"
    assert widget.address_label.text() == "Current cell: C2"


def test_refresh_covers_only_visible_window(widget: SpreadsheetWidget) -> None:
    changed = []
    widget.model.dataChanged.connect(lambda top_left, bottom_right, roles: changed.append(
        ((top_left.row(), top_left.column()), (bottom_right.row(), bottom_right.column()))
    ))
    widget.session.set_viewport_size(ViewportSize(400, 240))
    window = widget.session.window_for_scroll(0, 0)

    widget.set_cell_value(0, 0, "1")

    assert changed
    assert all(span == ((0, 0), (window.last_row, window.last_col)) for span in changed)
    assert (window.last_row, window.last_col) == (10, 5)


def test_resize_watcher_debounces(qapp) -> None:
    target = QtWidgets.QWidget()
    target.resize(300, 200)
    watcher = DebouncedResizeWatcher(target, delay_ms=10)
    sizes = []
    watcher.viewportSizeChanged.connect(lambda width, height: sizes.append((width, height)))

    for _ in range(3):
        event = QtGui.QResizeEvent(QtCore.QSize(300, 200), QtCore.QSize(0, 0))
        QtCore.QCoreApplication.sendEvent(target, event)
    assert watcher.resize_timer.isActive()

    QTest.qWait(100)
    assert sizes == [(300, 200)]


def test_app_window_commits_on_close(qapp, app_settings) -> None:
    window = GridSheetApp(app_settings=app_settings)
    session = window.session
    session.click_cell(0, 0)
    session.set_buffer("9")

    window.closeEvent(QtGui.QCloseEvent())

    assert session.store.raw_text(0, 0) == "9"
    assert window.spreadsheet.model.rowCount() == 10000


def test_set_cell_value_keeps_selection_and_pending_edit(widget: SpreadsheetWidget) -> None:
    widget.select_cell(2, 2)
    widget.session.set_buffer("x")

    widget.set_cell_value(0, 0, "5")

    assert widget.session.selected == (2, 2)
    assert widget.session.edit_buffer == "x"
    assert (2, 2) not in widget.session.store
    assert widget.get_cell_value(0, 0) == "5"


def test_in_grid_editor_commits_on_return_and_blur(qapp, widget: SpreadsheetWidget) -> None:
    widget.resize(800, 600)
    widget.show()
    qapp.processEvents()
    store = widget.session.store

    widget.table_view.clicked.emit(widget.model.index(0, 0))
    editor = widget.table_view.indexWidget(widget.model.index(0, 0))
    assert isinstance(editor, QtWidgets.QLineEdit)

    QTest.keyClicks(editor, "42")
    assert widget.formula_bar.text() == "42"
    QTest.keyClick(editor, Qt.Key_Return)

    assert store.raw_text(0, 0) == "42"
    assert widget.session.selected == (1, 0)
    assert widget.session.state is SelectionState.EDITING
    next_editor = widget.table_view.indexWidget(widget.model.index(1, 0))
    assert next_editor is not None
    assert next_editor.isVisible()

    QTest.keyClicks(next_editor, "7")
    QtCore.QCoreApplication.sendEvent(next_editor, QtGui.QFocusEvent(QtCore.QEvent.FocusOut))

    assert store.raw_text(1, 0) == "7"
    assert widget.session.state is SelectionState.SELECTED
    widget.close()
