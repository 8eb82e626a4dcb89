"""Sparse cell storage keyed by (row, col).

Only written coordinates hold a record, so a 10,000 x 10,000 sheet costs
memory in proportion to the cells a user has actually touched.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .sheet_utils import is_formula, make_key

logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]


class CellKind(enum.Enum):
    LITERAL = "literal"
    FORMULA = "formula"


@dataclass(frozen=True)
class Cell:
    """One content record: either a literal or a formula, never both."""

    kind: CellKind
    text: str

    @property
    def is_formula(self) -> bool:
        return self.kind is CellKind.FORMULA

    @classmethod
    def from_raw(cls, raw_text: str) -> "Cell":
        """Classify raw user input as formula or literal."""
        text = raw_text.strip()
        if is_formula(text):
            return cls(CellKind.FORMULA, text)
        return cls(CellKind.LITERAL, text)


class SparseCellStore:
    """Mapping of coordinate -> Cell for non-empty cells.

    The store is extent-agnostic: any non-negative coordinate may be
    written. Clamping to the visible grid is done by the session and
    viewport layers.
    """

    def __init__(self):
        self._cells: Dict[Coordinate, Cell] = {}
        # Bumped on every write so derived caches know when to drop
        self.version = 0

    def write(self, row: int, col: int, raw_text: str) -> Cell:
        """Store raw text at (row, col), replacing any previous record.

        Args:
            row: Row index (0-based)
            col: Column index (0-based)
            raw_text: User input; classified as formula when it starts with '='

        Returns:
            The stored Cell
        """
        if row < 0 or col < 0:
            raise ValueError(f"Coordinates must be non-negative, got ({row}, {col})")

        cell = Cell.from_raw(raw_text)
        self._cells[(row, col)] = cell
        self.version += 1
        logger.debug(f"Wrote {cell.kind.value} at {make_key(row, col)}: {cell.text!r}")
        return cell

    def read(self, row: int, col: int) -> Optional[Cell]:
        """Return the stored record, or None when the cell is empty."""
        return self._cells.get((row, col))

    def raw_text(self, row: int, col: int) -> str:
        """Return the editable text of a cell (formula or literal), "" if empty."""
        cell = self._cells.get((row, col))
        return cell.text if cell else ""

    def __len__(self):
        return len(self._cells)

    def __contains__(self, coordinate):
        return coordinate in self._cells
