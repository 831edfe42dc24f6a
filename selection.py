from dataclasses import dataclass
from typing import List, Optional, Sequence

from grid_errors import OutOfRange, UnknownColumn

IDLE = "idle"
FOCUSED = "focused"
RANGE_SELECTED = "range_selected"

KEY_UP = "ArrowUp"
KEY_DOWN = "ArrowDown"
KEY_LEFT = "ArrowLeft"
KEY_RIGHT = "ArrowRight"
KEY_TAB = "Tab"
KEY_ENTER = "Enter"
NAV_KEYS = {KEY_UP, KEY_DOWN, KEY_LEFT, KEY_RIGHT, KEY_TAB, KEY_ENTER}


@dataclass(frozen=True)
class CellRef:
    row: int
    key: str


def range_cells(anchor: CellRef, focus: CellRef, columns: Sequence[str]) -> List[CellRef]:
    """Rectangle spanned by two corners over ``columns`` in their current order."""
    columns = list(columns)
    if anchor.key not in columns or focus.key not in columns:
        return []
    r0, r1 = sorted((anchor.row, focus.row))
    c0, c1 = sorted((columns.index(anchor.key), columns.index(focus.key)))
    return [
        CellRef(r, columns[c]) for r in range(r0, r1 + 1) for c in range(c0, c1 + 1)
    ]


class SelectionState:
    """Focused cell plus an optional shift-click corner.

    ``anchor`` is the focused cell; ``focus`` is the far corner of a range
    selection. The covered cells are recomputed from the two corners on
    every query.
    """

    def __init__(self):
        self.anchor: Optional[CellRef] = None
        self.focus: Optional[CellRef] = None

    @property
    def state(self) -> str:
        if self.anchor is None:
            return IDLE
        if self.focus is None:
            return FOCUSED
        return RANGE_SELECTED

    @property
    def focused(self) -> Optional[CellRef]:
        return self.anchor

    def reset(self):
        self.anchor = None
        self.focus = None

    def cells(self, columns: Sequence[str]) -> List[CellRef]:
        if self.anchor is None:
            return []
        if self.focus is None:
            return [self.anchor] if self.anchor.key in columns else []
        return range_cells(self.anchor, self.focus, columns)

    # ---------- transitions ----------
    def click(self, row: int, key: str, columns: Sequence[str], row_count: int, shift: bool = False):
        if key not in columns:
            raise UnknownColumn(key)
        if row < 0 or row >= row_count:
            raise OutOfRange(row, row_count)
        target = CellRef(row, key)
        if shift and self.anchor is not None and self.anchor.key in columns:
            self.focus = target
            return
        self.anchor = target
        self.focus = None

    def handle_key(self, key: str, columns: Sequence[str], row_count: int, shift: bool = False) -> bool:
        """Move focus for a navigation key.

        Returns True when the key belongs to the grid, i.e. the shell must
        suppress its default behaviour. Tab is always consumed, even when
        the move is clamped.
        """
        if key not in NAV_KEYS:
            return False
        if self.anchor is None or self.anchor.key not in columns:
            return key == KEY_TAB

        columns = list(columns)
        row = self.anchor.row
        col = columns.index(self.anchor.key)
        next_row, next_col = row, col

        if key == KEY_DOWN or key == KEY_ENTER:
            next_row = row + 1
        elif key == KEY_UP:
            next_row = row - 1
        elif key == KEY_RIGHT:
            next_col = col + 1
        elif key == KEY_LEFT:
            next_col = col - 1
        elif key == KEY_TAB:
            if shift:
                next_col = col - 1
                if next_col < 0:
                    next_col = len(columns) - 1
                    next_row = row - 1
            else:
                next_col = col + 1
                if next_col >= len(columns):
                    next_col = 0
                    next_row = row + 1

        if 0 <= next_row < row_count and 0 <= next_col < len(columns):
            self.anchor = CellRef(next_row, columns[next_col])
            self.focus = None
        return True

    def reconcile(self, row_count: int, columns: Sequence[str], previous_columns: Optional[Sequence[str]] = None):
        """Clamp both corners onto the current bounds, or go idle if none remain."""
        if self.anchor is None:
            return
        columns = list(columns)
        if row_count <= 0 or not columns:
            self.reset()
            return
        self.anchor = self._clamp(self.anchor, row_count, columns, previous_columns)
        if self.focus is not None:
            self.focus = self._clamp(self.focus, row_count, columns, previous_columns)

    @staticmethod
    def _clamp(cell: CellRef, row_count: int, columns: List[str], previous_columns) -> CellRef:
        row = max(0, min(cell.row, row_count - 1))
        if cell.key in columns:
            return CellRef(row, cell.key)
        previous = list(previous_columns or [])
        idx = previous.index(cell.key) if cell.key in previous else 0
        return CellRef(row, columns[min(idx, len(columns) - 1)])
