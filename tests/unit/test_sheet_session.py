from __future__ import annotations

from gridsheet.sheet_session import (
    AdvanceDirection,
    CellView,
    EditSurface,
    SelectionState,
    SheetSession,
)
from gridsheet.viewport import ViewportSize


def test_idle_actions_are_noops() -> None:
    session = SheetSession()

    assert session.state is SelectionState.IDLE
    session.set_buffer("5")
    assert session.commit() is False
    assert session.confirm(EditSurface.GRID) is None
    session.blur()

    assert session.state is SelectionState.IDLE
    assert len(session.store) == 0
    assert session.current_address == ""


def test_click_enters_editing_with_prefilled_buffer() -> None:
    session = SheetSession()
    session.store.write(1, 2, "=A1+B1")

    session.click_cell(1, 2)

    assert session.state is SelectionState.EDITING
    assert session.selected == (1, 2)
    assert session.edit_buffer == "=A1+B1"
    assert session.current_address == "C2"


def test_click_commits_pending_edit() -> None:
    session = SheetSession()
    session.click_cell(0, 0)
    session.set_buffer("  42 ")

    session.click_cell(5, 5)

    assert session.store.raw_text(0, 0) == "42"
    assert session.edit_buffer == ""


def test_commit_is_idempotent() -> None:
    session = SheetSession()
    session.click_cell(0, 0)
    session.set_buffer("=A2+A3")

    assert session.commit() is True
    version = session.store.version
    assert session.commit() is False

    assert session.store.version == version
    assert session.store.read(0, 0).is_formula
    assert session.store.raw_text(0, 0) == "=A2+A3"


def test_empty_buffer_on_empty_cell_writes_nothing() -> None:
    session = SheetSession()
    session.click_cell(3, 3)
    session.blur()

    assert len(session.store) == 0


def test_grid_confirm_advances_and_keeps_editing() -> None:
    session = SheetSession()
    session.click_cell(2, 3)
    session.set_buffer("7")

    assert session.confirm(EditSurface.GRID, AdvanceDirection.DOWN) == (3, 3)

    assert session.state is SelectionState.EDITING
    assert session.store.raw_text(2, 3) == "7"


def test_formula_bar_confirm_advances_without_editing() -> None:
    session = SheetSession()
    session.click_cell(2, 3)
    session.set_buffer("7")

    assert session.confirm(EditSurface.FORMULA_BAR, AdvanceDirection.DOWN) == (3, 3)

    assert session.state is SelectionState.SELECTED
    assert session.store.raw_text(2, 3) == "7"


def test_advance_right_and_buffer_follows_selection() -> None:
    session = SheetSession()
    session.store.write(2, 4, "next")
    session.click_cell(2, 3)

    assert session.confirm(EditSurface.GRID, AdvanceDirection.RIGHT) == (2, 4)
    assert session.edit_buffer == "next"


def test_blur_commits_and_returns_to_selected() -> None:
    session = SheetSession()
    session.click_cell(0, 0)
    session.set_buffer("=B1+B1")
    session.store.write(0, 1, "4")

    session.blur()

    assert session.state is SelectionState.SELECTED
    assert session.selected == (0, 0)
    assert session.display_value(0, 0) == 8


def test_select_does_not_edit() -> None:
    session = SheetSession()
    session.select(4, 4)
    assert session.state is SelectionState.SELECTED


def test_write_cell_keeps_selection_and_pending_edit() -> None:
    session = SheetSession()
    session.click_cell(2, 2)
    session.set_buffer("x")

    assert session.write_cell(0, 0, " 5 ") is True
    assert session.write_cell(0, 0, "5") is False

    assert session.selected == (2, 2)
    assert session.state is SelectionState.EDITING
    assert session.edit_buffer == "x"
    assert session.store.raw_text(0, 0) == "5"
    assert (2, 2) not in session.store


def test_write_cell_on_selected_cell_refreshes_buffer() -> None:
    session = SheetSession()
    session.select(1, 1)

    session.write_cell(1, 1, "=A1")

    assert session.edit_buffer == "=A1"
    assert session.selected == (1, 1)


def test_movement_is_clamped_to_extent(app_settings) -> None:
    app_settings.set_grid_size(3, 3)
    session = SheetSession(app_settings=app_settings)

    session.click_cell(2, 2)
    assert session.confirm(EditSurface.GRID, AdvanceDirection.DOWN) == (2, 2)
    assert session.confirm(EditSurface.GRID, AdvanceDirection.RIGHT) == (2, 2)
    assert session.click_cell(50, -4) == (2, 0)


def test_render_window_is_bounded_by_viewport() -> None:
    session = SheetSession()
    session.store.write(0, 0, "5")
    session.store.write(5000, 5000, "far")
    session.set_viewport_size(ViewportSize(160, 48))

    window = session.window_for_scroll(0, 0)
    views = session.render_window()

    assert len(views) == window.cell_count == 9
    assert views[0] == CellView(0, 0, "5", selected=False, editing=False)


def test_cell_view_changes_only_with_its_inputs() -> None:
    session = SheetSession()
    session.store.write(0, 0, "1")
    before = session.cell_view(0, 0)

    session.store.write(9, 9, "unrelated")
    assert session.cell_view(0, 0) == before

    session.click_cell(0, 0)
    editing = session.cell_view(0, 0)
    assert editing.selected and editing.editing
    assert editing != before
