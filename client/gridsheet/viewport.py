"""Viewport windowing for a fixed-size cell grid.

Maps a scrolled pixel rectangle onto the inclusive row/column range that
has to be materialized. The computation is plain arithmetic on pixel
offsets, so its cost does not depend on grid extent or populated cells.
"""

import math
from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class ViewportSize:
    """Current size of the visible area in pixels."""

    width: int
    height: int


@dataclass(frozen=True)
class ViewportWindow:
    """Inclusive range of rows and columns intersecting the viewport.

    An empty window has last < first on at least one axis.
    """

    first_row: int
    last_row: int
    first_col: int
    last_col: int

    @classmethod
    def empty(cls) -> "ViewportWindow":
        return cls(0, -1, 0, -1)

    @property
    def is_empty(self) -> bool:
        return self.last_row < self.first_row or self.last_col < self.first_col

    @property
    def row_range(self) -> range:
        return range(self.first_row, self.last_row + 1)

    @property
    def col_range(self) -> range:
        return range(self.first_col, self.last_col + 1)

    @property
    def cell_count(self) -> int:
        if self.is_empty:
            return 0
        return len(self.row_range) * len(self.col_range)

    def coordinates(self) -> Iterator[Tuple[int, int]]:
        """Yield every (row, col) in the window, row-major."""
        if self.is_empty:
            return
        for row in self.row_range:
            for col in self.col_range:
                yield (row, col)


def _axis_range(offset, extent, cell_size, count, overscan):
    """Return the inclusive (first, last) indices for one axis."""
    if extent <= 0 or count <= 0:
        return 0, -1

    first = math.floor(max(offset, 0) / cell_size)
    visible = math.ceil(extent / cell_size) + 1
    last = first + visible - 1

    first = max(first - overscan, 0)
    last = min(last + overscan, count - 1)
    if first > last:
        # Scrolled past the end of the grid; pin to the last section
        first = last
    return first, last


def compute_window(scroll_x, scroll_y, width, height, cell_width, cell_height,
                   row_count, col_count, overscan=0) -> ViewportWindow:
    """Compute the visible cell window.

    Args:
        scroll_x: Horizontal scroll offset in pixels
        scroll_y: Vertical scroll offset in pixels
        width: Visible width in pixels
        height: Visible height in pixels
        cell_width: Fixed column width in pixels
        cell_height: Fixed row height in pixels
        row_count: Total logical rows
        col_count: Total logical columns
        overscan: Extra rows/columns to include on each side

    Returns:
        ViewportWindow covering floor(scroll / size) through
        ceil(extent / size) + 1 cells on each axis, clamped to the grid
    """
    if cell_width <= 0 or cell_height <= 0:
        raise ValueError(f"Cell dimensions must be positive, got {cell_width}x{cell_height}")
    if overscan < 0:
        raise ValueError(f"Overscan must be >= 0, got {overscan}")

    first_row, last_row = _axis_range(scroll_y, height, cell_height, row_count, overscan)
    first_col, last_col = _axis_range(scroll_x, width, cell_width, col_count, overscan)
    if last_row < first_row or last_col < first_col:
        return ViewportWindow.empty()
    return ViewportWindow(first_row, last_row, first_col, last_col)
