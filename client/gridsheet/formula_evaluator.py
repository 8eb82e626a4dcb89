"""
Formula Evaluator
Evaluates summation formulas ("=A1+B2+C3") against the sparse cell store.
"""

import logging
import math
import re
from typing import Dict, List, Union

from .cell_store import Coordinate, SparseCellStore
from .settings import AppSettings
from .sheet_utils import address_to_coordinate, make_key, parse_formula_references

logger = logging.getLogger(__name__)

CIRCULAR_REFERENCE = "#CIRCULAR!"

# Leading number in the style of JavaScript parseFloat
_LEADING_NUMBER_RE = re.compile(
    r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)

DisplayValue = Union[float, str]


class CircularReferenceError(Exception):
    """Raised internally when a formula reaches a cell already being evaluated."""

    def __init__(self, coordinate: Coordinate):
        super().__init__(f"Circular reference at {make_key(*coordinate)}")
        self.coordinate = coordinate


def numeric_value(text: str) -> float:
    """Interpret text as a number, the lenient spreadsheet way.

    The leading number is used ("12abc" -> 12.0); text without one counts
    as zero.
    """
    match = _LEADING_NUMBER_RE.match(text)
    if not match:
        return 0.0
    token = match.group(1)
    if token.endswith("Infinity"):
        return -math.inf if token.startswith("-") else math.inf
    return float(token)


def format_display_value(value: DisplayValue) -> str:
    """Format a display value for painting ("10.0" shows as "10")."""
    if isinstance(value, str):
        return value
    if math.isfinite(value) and value == int(value) and abs(value) < 1e21:
        return str(int(value))
    if math.isinf(value):
        return "-Infinity" if value < 0 else "Infinity"
    return repr(value)


class _Frame:
    """One formula on the evaluation stack."""

    __slots__ = ("coordinate", "pending", "total", "cut")

    def __init__(self, coordinate: Coordinate, pending: List[Coordinate]):
        self.coordinate = coordinate
        # Popped from the end, so stored reversed to keep reference order
        self.pending = pending[::-1]
        self.total = 0.0
        # True when a cyclic branch below this frame was counted as 0
        self.cut = False


class FormulaEvaluator:
    """Computes displayable values, resolving references depth-first.

    Each top-level evaluation tracks the coordinates currently in progress;
    reaching one of them again is a cycle. Completed formula values are
    memoized until the store's version changes.
    """

    def __init__(self, store: SparseCellStore, circular_mode: str = AppSettings.CIRCULAR_MODE_ERROR):
        """Initialize the formula evaluator.

        Args:
            store: The cell store to read from (never written to)
            circular_mode: "error" to display #CIRCULAR!, "zero" to let the
                cyclic branch contribute 0
        """
        if circular_mode not in AppSettings.CIRCULAR_MODES:
            raise ValueError(f"Unknown circular reference mode: {circular_mode!r}")
        self.store = store
        self.circular_mode = circular_mode
        self._cache: Dict[Coordinate, float] = {}
        self._cache_version = store.version

    def display_value(self, row: int, col: int) -> DisplayValue:
        """Return what the cell at (row, col) shows.

        Returns:
            "" for an empty cell, the text for a literal, the float sum for a
            formula, or CIRCULAR_REFERENCE when the formula reaches itself
        """
        cell = self.store.read(row, col)
        if cell is None:
            return ""
        if not cell.is_formula:
            return cell.text

        try:
            return self._evaluate((row, col))
        except CircularReferenceError as e:
            logger.debug(f"{e} while evaluating {make_key(row, col)}")
            return CIRCULAR_REFERENCE

    def display_text(self, row: int, col: int) -> str:
        return format_display_value(self.display_value(row, col))

    def references(self, row: int, col: int) -> List[Coordinate]:
        """Resolve the coordinates a formula cell refers to.

        Tokens that are not valid addresses are skipped.
        """
        cell = self.store.read(row, col)
        if cell is None or not cell.is_formula:
            return []

        coordinates = []
        for ref in parse_formula_references(cell.text):
            coordinate = address_to_coordinate(ref)
            if coordinate is None:
                logger.debug(f"Skipping invalid reference {ref!r} in {make_key(row, col)}")
                continue
            coordinates.append(coordinate)
        return coordinates

    def _current_cache(self) -> Dict[Coordinate, float]:
        if self._cache_version != self.store.version:
            self._cache.clear()
            self._cache_version = self.store.version
        return self._cache

    def _evaluate(self, root: Coordinate) -> float:
        cache = self._current_cache()
        if root in cache:
            return cache[root]

        in_progress = {root}
        stack = [_Frame(root, self.references(*root))]

        while stack:
            frame = stack[-1]

            if frame.pending:
                coordinate = frame.pending.pop()
                cell = self.store.read(*coordinate)
                if cell is None:
                    continue
                if not cell.is_formula:
                    frame.total += numeric_value(cell.text)
                    continue
                if coordinate in cache:
                    frame.total += cache[coordinate]
                    continue
                if coordinate in in_progress:
                    if self.circular_mode == AppSettings.CIRCULAR_MODE_ZERO:
                        logger.debug(f"Circular reference at {make_key(*coordinate)} counted as 0")
                        frame.cut = True
                        continue
                    raise CircularReferenceError(coordinate)

                in_progress.add(coordinate)
                stack.append(_Frame(coordinate, self.references(*coordinate)))
                continue

            # All references of this frame are summed
            stack.pop()
            in_progress.discard(frame.coordinate)
            total = 0.0 if math.isnan(frame.total) else frame.total
            # A value with a zeroed cyclic branch depends on where the walk started
            if not frame.cut:
                cache[frame.coordinate] = total
            if stack:
                stack[-1].total += total
                stack[-1].cut = stack[-1].cut or frame.cut

        return total
