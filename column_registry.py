import re
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional

from cell_coercion import FORMATS, TEXT
from grid_errors import (
    DuplicateKey,
    InvalidLabel,
    ProtectedColumn,
    UnknownColumn,
    UnknownFormat,
)

SERIAL_KEY = "serial"
ROW_ACTION_KEY = "row_action"
RESERVED_KEYS = (SERIAL_KEY, ROW_ACTION_KEY)

_WHITESPACE_RUN = re.compile(r"\s+")


def derive_key(label: str) -> str:
    return _WHITESPACE_RUN.sub("_", str(label).lower())


@dataclass(frozen=True)
class ColumnDef:
    label: str
    key: str
    format: str = TEXT


class ColumnRegistry:
    """Ordered user columns plus the hidden-columns set.

    ``serial`` and ``row_action`` are synthetic: they are never stored as
    user columns, cannot be removed and block any label deriving to them.
    """

    def __init__(self, columns: Optional[Iterable[ColumnDef]] = None):
        self._columns: List[ColumnDef] = []
        self._hidden: set[str] = set()
        for col in columns or []:
            self._append(col)

    # ---------- queries ----------
    def __iter__(self) -> Iterator[ColumnDef]:
        return iter(list(self._columns))

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, key) -> bool:
        return any(col.key == key for col in self._columns)

    @staticmethod
    def is_reserved(key: str) -> bool:
        return key in RESERVED_KEYS

    def keys(self) -> List[str]:
        return [col.key for col in self._columns]

    def labels(self) -> List[str]:
        return [col.label for col in self._columns]

    def get(self, key: str) -> ColumnDef:
        for col in self._columns:
            if col.key == key:
                return col
        raise UnknownColumn(key)

    def index_of(self, key: str) -> int:
        for idx, col in enumerate(self._columns):
            if col.key == key:
                return idx
        raise UnknownColumn(key)

    def format_of(self, key: str) -> str:
        return self.get(key).format

    @property
    def hidden(self) -> frozenset:
        return frozenset(self._hidden)

    def visible_keys(self) -> List[str]:
        return [col.key for col in self._columns if col.key not in self._hidden]

    # ---------- mutations ----------
    def add_column(self, label: str, fmt: str = TEXT) -> ColumnDef:
        key = derive_key(label)
        if not str(label).strip():
            raise InvalidLabel(label)
        if fmt not in FORMATS:
            raise UnknownFormat(fmt)
        col = ColumnDef(label=str(label), key=key, format=fmt)
        self._append(col)
        return col

    def remove_column(self, key: str) -> ColumnDef:
        if self.is_reserved(key):
            raise ProtectedColumn(key)
        idx = self.index_of(key)
        col = self._columns.pop(idx)
        self._hidden.discard(key)
        return col

    def set_format(self, key: str, fmt: str) -> ColumnDef:
        if self.is_reserved(key):
            raise ProtectedColumn(key)
        if fmt not in FORMATS:
            raise UnknownFormat(fmt)
        idx = self.index_of(key)
        self._columns[idx] = replace(self._columns[idx], format=fmt)
        return self._columns[idx]

    def set_hidden(self, keys: Iterable[str]) -> frozenset:
        keys = list(keys or [])
        for key in keys:
            if self.is_reserved(key):
                raise ProtectedColumn(key)
            if key not in self:
                raise UnknownColumn(key)
        self._hidden = set(keys)
        return self.hidden

    def _append(self, col: ColumnDef):
        if self.is_reserved(col.key) or col.key in self:
            raise DuplicateKey(col.key)
        self._columns.append(col)
