"""
Sheet Session
Owns the cell store, the evaluator and the selection/edit state of one sheet.

The rendering layer holds a reference to a SheetSession and drives it with
discrete input events (click, confirm key, focus loss, scroll, resize).
All writes to the store go through SheetSession.commit().
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .cell_store import SparseCellStore
from .formula_evaluator import FormulaEvaluator
from .settings import AppSettings
from .sheet_utils import cell_address, make_key
from .viewport import ViewportSize, ViewportWindow, compute_window

logger = logging.getLogger(__name__)


class SelectionState(enum.Enum):
    IDLE = "idle"
    SELECTED = "selected"
    EDITING = "editing"


class EditSurface(enum.Enum):
    """Where an edit was confirmed from."""

    GRID = "grid"
    FORMULA_BAR = "formula_bar"


class AdvanceDirection(enum.Enum):
    DOWN = (1, 0)  # Enter
    RIGHT = (0, 1)  # Tab


@dataclass(frozen=True)
class CellView:
    """Minimal per-cell render record; compare by value to skip repaints."""

    row: int
    col: int
    text: str
    selected: bool
    editing: bool


class SheetSession:
    """Selection/edit state machine over a sparse sheet."""

    def __init__(self, store: Optional[SparseCellStore] = None, app_settings: Optional[AppSettings] = None):
        """Initialize the session.

        Args:
            store: Cell store to edit. A new empty store is created if None.
            app_settings: AppSettings for grid extent, cell size and circular
                reference mode. Built-in defaults are used if None.
        """
        self.store = store if store is not None else SparseCellStore()
        self.app_settings = app_settings

        if app_settings is not None:
            self.row_count, self.col_count = app_settings.get_grid_size()
            self.cell_width, self.cell_height = app_settings.get_cell_size()
            self.overscan = app_settings.get_overscan()
            circular_mode = app_settings.get_circular_reference_mode()
        else:
            defaults = AppSettings.DEFAULTS
            self.row_count, self.col_count = defaults["row_count"], defaults["column_count"]
            self.cell_width, self.cell_height = defaults["cell_width"], defaults["cell_height"]
            self.overscan = defaults["overscan"]
            circular_mode = defaults["circular_reference_mode"]

        self.evaluator = FormulaEvaluator(self.store, circular_mode)

        self.selected: Optional[Tuple[int, int]] = None
        self.editing = False
        self.edit_buffer = ""

        self.viewport_size = ViewportSize(0, 0)
        self.window = ViewportWindow.empty()

    # -- state -------------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        if self.selected is None:
            return SelectionState.IDLE
        if self.editing:
            return SelectionState.EDITING
        return SelectionState.SELECTED

    @property
    def current_address(self) -> str:
        """Address of the selected cell ("B3"), or "" when nothing is selected."""
        if self.selected is None:
            return ""
        return cell_address(*self.selected)

    def _clamp(self, row, col):
        row = min(max(row, 0), self.row_count - 1)
        col = min(max(col, 0), self.col_count - 1)
        return row, col

    def _move_to(self, row, col, editing):
        self.selected = self._clamp(row, col)
        self.editing = editing
        self.edit_buffer = self.store.raw_text(*self.selected)

    # -- transitions -------------------------------------------------------

    def click_cell(self, row: int, col: int) -> Tuple[int, int]:
        """Commit any pending edit, then start editing the clicked cell."""
        self.commit()
        self._move_to(row, col, editing=True)
        logger.debug(f"Editing {make_key(*self.selected)}")
        return self.selected

    def select(self, row: int, col: int) -> Tuple[int, int]:
        """Commit any pending edit, then select a cell without editing it."""
        self.commit()
        self._move_to(row, col, editing=False)
        return self.selected

    def set_buffer(self, text: str):
        """Replace the in-progress edit text."""
        if self.selected is None:
            return
        self.edit_buffer = text

    def commit(self) -> bool:
        """Write the trimmed edit buffer to the selected cell.

        Returns:
            True if the store changed, False for a no-op (no selection or
            the cell already holds the same text)
        """
        if self.selected is None:
            return False

        row, col = self.selected
        new_text = self.edit_buffer.strip()
        if self.store.raw_text(row, col) == new_text:
            return False

        self.store.write(row, col, new_text)
        return True

    def write_cell(self, row: int, col: int, text: str) -> bool:
        """Write text straight to a cell without touching the selection.

        A pending edit buffer is left alone unless the written cell is the
        selected one, in which case the buffer is refreshed to the new text.
        """
        new_text = text.strip()
        if self.store.raw_text(row, col) == new_text:
            return False

        self.store.write(row, col, new_text)
        if self.selected == (row, col):
            self.edit_buffer = new_text
        return True

    def confirm(self, surface: EditSurface, direction: AdvanceDirection = AdvanceDirection.DOWN) -> Optional[Tuple[int, int]]:
        """Commit and advance the selection.

        Confirming from the in-grid editor keeps editing on the next cell;
        confirming from the formula bar only moves the selection.

        Returns:
            The newly selected coordinate, or None with no selection
        """
        if self.selected is None:
            return None

        self.commit()
        row_step, col_step = direction.value
        row, col = self.selected
        self._move_to(row + row_step, col + col_step, editing=surface is EditSurface.GRID)
        return self.selected

    def blur(self):
        """Edit surface lost focus: commit and fall back to plain selection."""
        if self.selected is None:
            return
        self.commit()
        self._move_to(*self.selected, editing=False)

    # -- render boundary ---------------------------------------------------

    def display_value(self, row: int, col: int):
        return self.evaluator.display_value(row, col)

    def display_text(self, row: int, col: int) -> str:
        return self.evaluator.display_text(row, col)

    def cell_view(self, row: int, col: int) -> CellView:
        selected = self.selected == (row, col)
        return CellView(
            row=row,
            col=col,
            text=self.display_text(row, col),
            selected=selected,
            editing=selected and self.editing,
        )

    def render_window(self, window: Optional[ViewportWindow] = None) -> List[CellView]:
        """Build the cell views for every coordinate in the window."""
        if window is None:
            window = self.window
        return [self.cell_view(row, col) for row, col in window.coordinates()]

    def set_viewport_size(self, size: ViewportSize):
        self.viewport_size = size

    def window_for_scroll(self, scroll_x: int, scroll_y: int) -> ViewportWindow:
        """Recompute the visible window for the given scroll offsets."""
        self.window = compute_window(
            scroll_x,
            scroll_y,
            self.viewport_size.width,
            self.viewport_size.height,
            self.cell_width,
            self.cell_height,
            self.row_count,
            self.col_count,
            self.overscan,
        )
        return self.window
