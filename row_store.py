# ~/Apps/gridcore/row_store.py
import itertools
import operator
from typing import Iterable, List, Optional

import pandas as pd

from cell_coercion import coerce_cell_value, default_for_format
from column_registry import SERIAL_KEY, ColumnDef, ColumnRegistry
from grid_errors import OutOfRange, ProtectedColumn, UnknownColumn


class RowStore:
    """Ordered rows held in an object-dtype DataFrame.

    The index carries an opaque row id assigned at creation and never reused.
    ``serial`` is a 1..N projection of the current order, rewritten by
    ``_renumber`` after every structural change.
    """

    def __init__(self, registry: ColumnRegistry, rows: Optional[Iterable[dict]] = None):
        self.registry = registry
        self._ids = itertools.count(1)
        self._df = pd.DataFrame(columns=self._columns(), dtype=object)
        rows = list(rows or [])
        if rows:
            self.append_rows(rows, coerce=True)

    # ---------- helpers ----------
    def _columns(self) -> List[str]:
        return [SERIAL_KEY] + self.registry.keys()

    def build_default_row(self) -> dict:
        return {col.key: default_for_format(col.format) for col in self.registry}

    def _build_row(self, values: Optional[dict], coerce: bool) -> dict:
        row = self.build_default_row()
        for key, value in (values or {}).items():
            if key not in row:
                continue
            row[key] = coerce_cell_value(self.registry.format_of(key), value) if coerce else value
        return row

    def _frame(self, rows: List[dict], ids: List[int]) -> pd.DataFrame:
        return pd.DataFrame(
            rows, columns=self._columns(), index=pd.Index(ids), dtype=object
        )

    def _renumber(self):
        self._df[SERIAL_KEY] = pd.Series(
            list(range(1, len(self._df) + 1)), index=self._df.index, dtype=object
        )

    def _check_position(self, position: int) -> int:
        total = len(self._df)
        try:
            position = operator.index(position)
        except TypeError:
            raise OutOfRange(position, total) from None
        if position < 0 or position >= total:
            raise OutOfRange(position, total)
        return position

    def _check_key(self, key: str):
        if self.registry.is_reserved(key):
            raise ProtectedColumn(key)
        if key not in self.registry:
            raise UnknownColumn(key)

    # ---------- queries ----------
    def __len__(self) -> int:
        return len(self._df)

    def frame(self) -> pd.DataFrame:
        return self._df.copy()

    def row_ids(self) -> List[int]:
        return list(self._df.index)

    def id_at(self, position: int) -> int:
        return self._df.index[self._check_position(position)]

    def serials(self) -> List[int]:
        return [int(v) for v in self._df[SERIAL_KEY]]

    def record_by_id(self, row_id) -> dict:
        row = self._df.loc[row_id]
        return {key: row[key] for key in self._columns()}

    def records(self) -> List[dict]:
        return [
            {key: row[key] for key in self._columns()}
            for _, row in self._df.iterrows()
        ]

    def value(self, position: int, key: str):
        if key != SERIAL_KEY and key not in self.registry:
            raise UnknownColumn(key)
        return self._df.iat[self._check_position(position), self._df.columns.get_loc(key)]

    # ---------- row operations ----------
    def add_row(self, values: Optional[dict] = None) -> int:
        return self.append_rows([values or {}], coerce=True)[0]

    def append_rows(self, rows: List[dict], coerce: bool = False) -> List[int]:
        if not rows:
            return []
        ids = [next(self._ids) for _ in rows]
        new_rows = self._frame([self._build_row(r, coerce) for r in rows], ids)
        if len(self._df) == 0:
            self._df = new_rows
        else:
            self._df = pd.concat([self._df, new_rows])
        self._renumber()
        return ids

    def delete_row(self, position: int) -> dict:
        row_id = self.id_at(position)
        return self.delete_row_id(row_id)

    def delete_row_id(self, row_id) -> dict:
        removed = self.record_by_id(row_id)
        self._df = self._df.drop(index=row_id)
        self._renumber()
        return removed

    def edit_cell(self, position: int, key: str, raw_value):
        return self.edit_cell_by_id(self.id_at(position), key, raw_value)

    def edit_cell_by_id(self, row_id, key: str, raw_value):
        self._check_key(key)
        value = coerce_cell_value(self.registry.format_of(key), raw_value)
        self._df.at[row_id, key] = value
        return value

    def reorder(self, row_ids: List[int]):
        if sorted(row_ids) != sorted(self._df.index):
            raise ValueError("reorder requires a permutation of the current row ids")
        self._df = self._df.loc[list(row_ids)].copy()
        self._renumber()

    # ---------- column operations ----------
    def add_column(self, col: ColumnDef):
        default = default_for_format(col.format)
        self._df[col.key] = pd.Series(
            [default] * len(self._df), index=self._df.index, dtype=object
        )
        self._df = self._df[self._columns()].copy()

    def remove_column(self, key: str):
        if key in self._df.columns:
            self._df = self._df.drop(columns=[key])
