import math
import numbers
from typing import Mapping, Optional, Sequence, Tuple

import pandas as pd

from cell_coercion import stringify
from config_paths import SEARCHABLE_COLUMNS_DEFAULT, TABS_DEFAULT
from grid_errors import UnknownColumn

ASC = "asc"
DESC = "desc"
DIRECTIONS = (ASC, DESC)

STATUS_KEY = "status"
DEFAULT_TABS = TABS_DEFAULT
DEFAULT_SEARCHABLE_COLUMNS = tuple(SEARCHABLE_COLUMNS_DEFAULT)


def _is_number(value) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _numeric_text(value):
    """Number a string compares as against a number, or None (NaN)."""
    stripped = stringify(value).strip()
    if stripped == "":
        return 0
    if "_" in stripped:
        return None
    try:
        number = float(stripped)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def _sort_key(value, numeric_column: bool = False):
    # In a column holding numbers, text that reads as a number (blank is 0)
    # compares numerically; remaining text sorts after all numbers.
    if _is_number(value):
        return (0, value, "")
    if numeric_column:
        number = _numeric_text(value)
        if number is not None:
            return (0, number, "")
    return (1, 0, stringify(value))


def sort_order(frame: pd.DataFrame, key: str, direction: str = ASC) -> list:
    """Row ids of ``frame`` in sorted order. Ties keep their input order."""
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown sort direction '{direction}' (use asc or desc)")
    if key not in frame.columns:
        raise UnknownColumn(key)
    ids = list(frame.index)
    values = list(frame[key])
    numeric_column = any(_is_number(v) for v in values)
    order = sorted(
        range(len(ids)),
        key=lambda i: _sort_key(values[i], numeric_column),
        reverse=direction == DESC,
    )
    return [ids[i] for i in order]


def _text(frame: pd.DataFrame, key: str) -> pd.Series:
    if key not in frame.columns:
        return pd.Series([""] * len(frame), index=frame.index, dtype=object)
    return frame[key].map(stringify).astype(object)


def filter_mask(frame: pd.DataFrame, key: str, substring: str) -> pd.Series:
    if key not in frame.columns:
        raise UnknownColumn(key)
    needle = ("" if substring is None else str(substring)).lower()
    return _text(frame, key).map(lambda s: needle in s.lower()).astype(bool)


def tab_matches(status, tab: str, tabs: Optional[Mapping] = None) -> bool:
    tabs = DEFAULT_TABS if tabs is None else tabs
    if tab not in tabs:
        return False
    target = tabs[tab]
    if target is None:
        return True
    return stringify(status).lower().strip() == str(target).lower().strip()


def tab_mask(frame: pd.DataFrame, tab: str, tabs: Optional[Mapping] = None) -> pd.Series:
    return _text(frame, STATUS_KEY).map(lambda s: tab_matches(s, tab, tabs)).astype(bool)


def search_mask(
    frame: pd.DataFrame,
    term: str,
    searchable: Sequence[str] = DEFAULT_SEARCHABLE_COLUMNS,
) -> pd.Series:
    needle = ("" if term is None else str(term)).lower().strip()
    joined = pd.Series([""] * len(frame), index=frame.index, dtype=object)
    for idx, key in enumerate(searchable):
        part = _text(frame, key)
        joined = part if idx == 0 else joined + " " + part
    return joined.map(lambda s: needle in s.lower()).astype(bool)


def compute_view(
    frame: pd.DataFrame,
    tab: str = "All",
    search: str = "",
    column_filter: Optional[Tuple[str, str]] = None,
    tabs: Optional[Mapping] = None,
    searchable: Sequence[str] = DEFAULT_SEARCHABLE_COLUMNS,
) -> pd.DataFrame:
    """Rows of the full ``frame`` passing tab AND search AND column filter."""
    mask = tab_mask(frame, tab, tabs) & search_mask(frame, search, searchable)
    if column_filter is not None:
        key, substring = column_filter
        mask &= filter_mask(frame, key, substring)
    return frame.loc[mask]
