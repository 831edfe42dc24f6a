"""CSV export/import for the grid.

Import aligns fields to columns by position only. The header line is
discarded and never matched against column labels or keys, so a CSV
written before columns were reordered will load misaligned.
"""

import csv
import io
import logging
import sys
from dataclasses import dataclass, field
from typing import List, Sequence

import pandas as pd

from cell_coercion import coerce_cell_value, is_numeric_format, parse_number
from column_registry import ColumnDef
from grid_errors import MalformedCsv, MalformedRow

logger = logging.getLogger(__name__)

# exported cells can be arbitrarily long; C long caps the limit on some platforms
csv.field_size_limit(min(sys.maxsize, 2**31 - 1))


@dataclass
class ImportResult:
    rows: List[dict] = field(default_factory=list)
    skipped: int = 0


def decode_csv_bytes(data) -> str:
    if isinstance(data, str):
        return data
    return bytes(data).decode("utf-8-sig", errors="replace")


def export_csv(columns: Sequence[ColumnDef], rows) -> str:
    """Serialize ``rows`` (DataFrame or list of dicts) under ``columns``.

    Visibility is ignored; every column is written in registry order.
    """
    keys = [col.key for col in columns]
    labels = [col.label for col in columns]
    if not keys:
        return ""
    if isinstance(rows, pd.DataFrame):
        frame = rows.reindex(columns=keys).copy()
    else:
        frame = pd.DataFrame(list(rows), columns=keys, dtype=object)
    for col in columns:
        if is_numeric_format(col.format):
            frame[col.key] = pd.Series(
                [parse_number(v) for v in frame[col.key]], index=frame.index, dtype=object
            )
        else:
            frame[col.key] = frame[col.key].map(lambda v: "" if v is None else v)
    return frame.to_csv(index=False, header=labels, lineterminator="\n")


def parse_csv_rows(text: str) -> List[List[str]]:
    try:
        return [row for row in csv.reader(io.StringIO(text)) if row]
    except csv.Error as exc:
        raise MalformedCsv(str(exc)) from exc


def coerce_row(fields: Sequence[str], columns: Sequence[ColumnDef], line_no: int = 0) -> dict:
    if len(fields) < len(columns):
        raise MalformedRow(line_no, len(fields), len(columns))
    return {
        col.key: coerce_cell_value(col.format, fields[idx])
        for idx, col in enumerate(columns)
    }


def import_csv(text, columns: Sequence[ColumnDef]) -> ImportResult:
    columns = list(columns)
    parsed = parse_csv_rows(decode_csv_bytes(text))
    result = ImportResult()
    for line_no, fields in enumerate(parsed[1:], start=2):
        try:
            result.rows.append(coerce_row(fields, columns, line_no))
        except MalformedRow as exc:
            logger.debug("Skipping: %s", exc)
            result.skipped += 1
    logger.debug(
        "Parsed %d CSV rows (%d short rows skipped)", len(result.rows), result.skipped
    )
    return result
