# GridSheet Package
# The engine modules (sheet_utils, cell_store, formula_evaluator, viewport,
# sheet_session) do not import Qt; the widgets and app do.

from .cell_store import Cell, CellKind, SparseCellStore
from .formula_evaluator import CIRCULAR_REFERENCE, FormulaEvaluator
from .sheet_session import AdvanceDirection, CellView, EditSurface, SelectionState, SheetSession
from .viewport import ViewportSize, ViewportWindow, compute_window

__all__ = [
    "AdvanceDirection",
    "CIRCULAR_REFERENCE",
    "Cell",
    "CellKind",
    "CellView",
    "EditSurface",
    "FormulaEvaluator",
    "SelectionState",
    "SheetSession",
    "SparseCellStore",
    "ViewportSize",
    "ViewportWindow",
    "compute_window",
]
