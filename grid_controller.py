# ~/Apps/gridcore/grid_controller.py
import logging
from typing import Callable, Iterable, Optional
from urllib.parse import quote

import pandas as pd

from cell_coercion import FORMULA_VIEW, NORMAL_VIEW, TEXT, strip_formula_prefix
from column_registry import SERIAL_KEY
from csv_codec import ImportResult, export_csv, import_csv
from grid_errors import GridError, OutOfRange, UnknownColumn
from grid_state import GridState
from sort_filter import ASC, DIRECTIONS, sort_order

logger = logging.getLogger(__name__)


class GridController:
    """Command surface for the grid shell.

    Every command validates before mutating, so a rejected command leaves
    the state untouched. Structural errors are reported through the
    status callback and re-raised to the caller.
    """

    def __init__(self, state: GridState, set_status_cb: Optional[Callable[[str, float], None]] = None):
        self.state = state
        self._set_status = set_status_cb or (lambda *_: None)

    # ---------- helpers ----------
    @property
    def registry(self):
        return self.state.registry

    @property
    def store(self):
        return self.state.store

    @property
    def selection(self):
        return self.state.selection

    def _fail(self, exc: Exception):
        logger.info("Rejected command: %s", exc)
        self._set_status(str(exc), 3)
        raise exc

    def _row_id_for(self, index: int):
        ids = self.state.view_row_ids()
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(ids):
            self._fail(OutOfRange(index, len(ids)))
        return ids[index]

    def _reconcile(self, previous_columns=None):
        self.selection.reconcile(
            len(self.state.view_row_ids()),
            self.state.editable_columns(),
            previous_columns,
        )

    # ---------- rows ----------
    def add_row(self) -> int:
        row_id = self.store.add_row()
        self._set_status("Added row", 2)
        logger.debug("Added row id=%s (rows=%d)", row_id, len(self.store))
        return row_id

    def delete_row(self, index: int) -> dict:
        row_id = self._row_id_for(index)
        removed = self.store.delete_row_id(row_id)
        self._reconcile(self.state.editable_columns())
        self._set_status(f"Deleted row {removed[SERIAL_KEY]}", 2)
        logger.debug("Deleted row id=%s (rows=%d)", row_id, len(self.store))
        return removed

    def edit_cell(self, index: int, key: str, value):
        row_id = self._row_id_for(index)
        raw = strip_formula_prefix(value, self.state.view_mode)
        try:
            stored = self.store.edit_cell_by_id(row_id, key, raw)
        except GridError as exc:
            self._fail(exc)
        logger.debug("Edited row id=%s %s=%r", row_id, key, stored)
        return stored

    # ---------- columns ----------
    def add_column(self, label: str, fmt: str = TEXT) -> str:
        try:
            col = self.registry.add_column(label, fmt)
        except GridError as exc:
            self._fail(exc)
        self.store.add_column(col)
        self._set_status(f"Inserted column '{col.label}'", 2)
        return col.key

    def delete_column(self, key: str):
        previous = self.state.editable_columns()
        try:
            col = self.registry.remove_column(key)
        except GridError as exc:
            self._fail(exc)
        self.store.remove_column(key)
        if self.state.column_filter and self.state.column_filter[0] == key:
            self.state.column_filter = None
        self._reconcile(previous)
        self._set_status(f"Deleted column '{col.key}'", 3)
        return col

    def set_column_format(self, key: str, fmt: str):
        try:
            col = self.registry.set_format(key, fmt)
        except GridError as exc:
            self._fail(exc)
        self._set_status(f"Formatted '{key}' as {fmt}", 2)
        return col

    def set_hidden_columns(self, keys: Iterable[str]) -> frozenset:
        previous = self.state.editable_columns()
        try:
            hidden = self.registry.set_hidden(keys)
        except GridError as exc:
            self._fail(exc)
        self._reconcile(previous)
        self._set_status(f"Hidden columns: {', '.join(sorted(hidden)) or 'none'}", 2)
        return hidden

    # ---------- view ----------
    def sort(self, key: str, direction: str = ASC):
        if direction not in DIRECTIONS:
            self._fail(ValueError(f"Unknown sort direction '{direction}' (use asc or desc)"))
        if key != SERIAL_KEY and key not in self.registry:
            self._fail(UnknownColumn(key))
        # sorting commits the new order to the store, unlike filtering
        self.store.reorder(sort_order(self.store.frame(), key, direction))
        self._reconcile(self.state.editable_columns())
        self._set_status(f"Sorted by {key} ({direction})", 2)

    def filter(self, key: str, substring: str) -> pd.DataFrame:
        if key != SERIAL_KEY and key not in self.registry:
            self._fail(UnknownColumn(key))
        self.state.column_filter = (key, "" if substring is None else str(substring))
        self._reconcile(self.state.editable_columns())
        self._set_status(f'Filtered {key} by "{substring}"', 2)
        return self.view()

    def clear_filter(self):
        self.state.column_filter = None
        self._reconcile(self.state.editable_columns())
        self._set_status("Filter cleared", 2)

    def set_search_term(self, text: str):
        self.state.search_term = "" if text is None else str(text)
        self._reconcile(self.state.editable_columns())
        logger.debug('Search term updated: "%s"', self.state.search_term)

    def set_active_tab(self, tab_name: str):
        self.state.active_tab = tab_name
        self._reconcile(self.state.editable_columns())
        self._set_status(f"Switched to {tab_name}", 2)

    def toggle_cell_view_mode(self) -> str:
        self.state.view_mode = NORMAL_VIEW if self.state.formula_view else FORMULA_VIEW
        self._set_status(f"Cell view mode: {self.state.view_mode}", 2)
        return self.state.view_mode

    def view(self) -> pd.DataFrame:
        return self.state.view()

    def view_records(self) -> list:
        return self.view().to_dict(orient="records")

    # ---------- selection ----------
    def click_cell(self, index: int, key: str, shift: bool = False):
        try:
            self.selection.click(
                index, key, self.state.editable_columns(), len(self.state.view_row_ids()), shift
            )
        except GridError as exc:
            self._fail(exc)
        return self.selection.state

    def handle_key(self, key: str, shift: bool = False) -> bool:
        return self.selection.handle_key(
            key, self.state.editable_columns(), len(self.state.view_row_ids()), shift
        )

    def selected_cells(self) -> list:
        return self.selection.cells(self.state.editable_columns())

    def reset_selection(self):
        self.selection.reset()

    # ---------- csv ----------
    def import_csv(self, file_bytes) -> ImportResult:
        try:
            result = import_csv(file_bytes, list(self.registry))
        except GridError as exc:
            self._fail(exc)
        self.store.append_rows(result.rows)
        self._reconcile(self.state.editable_columns())
        skipped = f" ({result.skipped} skipped)" if result.skipped else ""
        self._set_status(
            f"Imported {len(result.rows)} row{'s' if len(result.rows) != 1 else ''}{skipped}", 2
        )
        logger.info("Imported %d rows, skipped %d", len(result.rows), result.skipped)
        return result

    def export_csv(self) -> str:
        text = export_csv(list(self.registry), self.state.full_view())
        self._set_status("Exported data as CSV", 2)
        return text

    def share_url(self, origin: Optional[str] = None) -> str:
        origin = (origin or self.state.config["SHARE_ORIGIN"]).rstrip("/")
        return f"{origin}/table?tab={quote(self.state.active_tab)}"
