from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from ..models.record import NormalizedRecord

"""Tabular record extraction.

Turns a decoded grid (rows of cell values, row 0 = header) into the ordered list
of NormalizedRecords the reconciliation engine consumes.

Column layouts seen in uploaded sheets:
    ID | Response | Notes              (three columns)
    ID | <label>  | Response | Notes   (four columns)

Column 2 is read as Response only when the row has a fourth column; otherwise it
is the Notes column. Rows whose ID cell is blank are dropped without error.
"""

__all__ = [
    "EmptyInputError",
    "cell_to_str",
    "extract_records",
]

ID_COL = 0
LABEL_COL = 1
RESPONSE_COL = 2
NOTES_COL = 3


class EmptyInputError(Exception):
    """Raised when the grid cannot hold a header row plus one data row."""


def cell_to_str(value: Any) -> str:
    """Coerce a decoded cell value to trimmed text ('' for blanks)."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        # Excel stores every number as float; 1001.0 is an ID of "1001"
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _cell(row: Sequence[Any], index: int) -> str:
    if index >= len(row):
        return ""
    return cell_to_str(row[index])


def _extract_row(row: Any, row_number: int) -> NormalizedRecord | None:
    if not isinstance(row, (list, tuple)) or len(row) == 0:
        return None

    record_id = _cell(row, ID_COL)
    if not record_id:
        return None

    col1 = _cell(row, LABEL_COL)
    col2 = _cell(row, RESPONSE_COL)
    col3 = _cell(row, NOTES_COL)
    has_notes_col = len(row) > NOTES_COL

    response = ""
    col2_consumed = False
    if has_notes_col and col2:
        response = col2
        col2_consumed = True
    elif col1:
        response = col1

    if col3:
        notes = col3
    elif col2 and not col2_consumed:
        notes = col2
    else:
        notes = ""

    return NormalizedRecord(id=record_id, response=response, notes=notes, row_number=row_number)


def extract_records(grid: Sequence[Any] | None) -> list[NormalizedRecord]:
    """Extract keyed records from a raw grid.

    Row 0 is always treated as the header, whatever it contains. Output order
    follows row order.

    Raises:
        EmptyInputError: grid has fewer than 2 rows
    """
    if grid is None or len(grid) < 2:
        raise EmptyInputError("spreadsheet must contain at least a header row and one data row")

    records: list[NormalizedRecord] = []
    for index in range(1, len(grid)):
        record = _extract_row(grid[index], row_number=index + 1)
        if record is not None:
            records.append(record)
    return records
