"""
Sheet Utilities
Cell addressing (A1-style) and the summation-only formula grammar.
"""

import re
from typing import List, Optional, Tuple

FORMULA_MARKER = "="
REFERENCE_SEPARATOR = "+"

# Row numbers longer than this are never addresses; int() on thousands of
# digits raises on interpreters with a conversion limit.
MAX_ROW_DIGITS = 18
ADDRESS_RE = re.compile(r"([A-Z]+)([0-9]{1,%d})" % MAX_ROW_DIGITS)


def make_key(row: int, col: int) -> str:
    """Build the "row,col" text key for a coordinate."""
    return f"{row},{col}"


def column_label(col: int) -> str:
    """Convert column index to letter (0->A, 1->B, ..., 25->Z, 26->AA)"""
    if col < 0:
        raise ValueError(f"Column index must be >= 0, got {col}")
    result = ""
    while col >= 0:
        result = chr(65 + (col % 26)) + result
        col = col // 26 - 1
    return result


def cell_address(row: int, col: int) -> str:
    """Get cell reference string like 'A1' from row/col indices."""
    if row < 0:
        raise ValueError(f"Row index must be >= 0, got {row}")
    return f"{column_label(col)}{row + 1}"


def letter_to_col(letter: str) -> int:
    """Convert column letter to index (A->0, B->1, ..., Z->25, AA->26)"""
    col = 0
    for char in letter:
        col = col * 26 + (ord(char) - 65 + 1)
    return col - 1


def address_to_coordinate(address: str) -> Optional[Tuple[int, int]]:
    """Parse cell reference like 'A1' into (row, col).

    Only upper-case column letters followed by a 1-based row number are
    accepted; absolute markers ($A$1) and lower-case letters are not.

    Args:
        address: Cell reference like "A1", "C10"

    Returns:
        Tuple of (row, col) or None if invalid
    """
    match = ADDRESS_RE.fullmatch(address)
    if not match:
        return None

    col_letter, row_num = match.groups()
    row = int(row_num) - 1  # Convert to 0-based
    if row < 0:
        return None
    return (row, letter_to_col(col_letter))


def is_formula(text: str) -> bool:
    """Check whether raw cell text is a formula (starts with '=')."""
    return text.strip().startswith(FORMULA_MARKER)


def parse_formula_references(formula: str) -> List[str]:
    """Extract the referenced addresses from a formula.

    "=A1+B2" -> ["A1", "B2"]. Tokens are returned as written; resolving
    them to coordinates is left to address_to_coordinate.
    """
    expr = formula.replace(FORMULA_MARKER, "", 1).strip()
    pieces = (piece.strip() for piece in expr.split(REFERENCE_SEPARATOR))
    return [piece for piece in pieces if piece]
