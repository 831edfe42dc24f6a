from typing import Optional, Tuple

import pandas as pd

from cell_coercion import FORMULA_VIEW, NORMAL_VIEW
from column_registry import SERIAL_KEY, ColumnRegistry
from config_paths import default_config
from row_store import RowStore
from selection import SelectionState
from sort_filter import compute_view


class GridState:
    """Everything one grid session owns. Mutated only by GridController."""

    def __init__(self, registry: ColumnRegistry, rows=None, config=None):
        self.config = dict(default_config())
        if config:
            self.config.update(config)

        self.registry = registry
        self.store = RowStore(registry, rows)
        self.selection = SelectionState()

        self.active_tab: str = "All"
        self.search_term: str = ""
        self.column_filter: Optional[Tuple[str, str]] = None
        self.view_mode: str = NORMAL_VIEW

    @property
    def formula_view(self) -> bool:
        return self.view_mode == FORMULA_VIEW

    def editable_columns(self) -> list:
        return self.registry.visible_keys()

    def full_view(self) -> pd.DataFrame:
        # always recomputed from the whole store
        return compute_view(
            self.store.frame(),
            tab=self.active_tab,
            search=self.search_term,
            column_filter=self.column_filter,
            tabs=self.config["TABS"],
            searchable=self.config["SEARCHABLE_COLUMNS"],
        )

    def view(self) -> pd.DataFrame:
        return self.full_view()[[SERIAL_KEY] + self.registry.visible_keys()]

    def view_row_ids(self) -> list:
        return list(self.full_view().index)
