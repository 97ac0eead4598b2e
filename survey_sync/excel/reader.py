from __future__ import annotations

from pathlib import Path
from typing import Any

import openpyxl
import pandas as pd

from .extractor import cell_to_str

"""Spreadsheet decoding.

Reads one worksheet into a raw grid (list of rows, each a list of str | None).
Row 0 of the grid is the header row. pandas pads every row to the sheet width,
which the extractor relies on to tell three- and four-column layouts apart.

Sheet choice: explicit sheet name if given, else the first worksheet that is not
hidden (openpyxl sheet_state), else the first sheet in the workbook.
"""

__all__ = [
    "SpreadsheetReadError",
    "first_visible_sheet",
    "read_grid",
]

_OPENPYXL_SUFFIXES = {".xlsx", ".xlsm"}


class SpreadsheetReadError(Exception):
    """Raised when the workbook cannot be opened or the sheet is missing."""


def first_visible_sheet(path: Path) -> str | None:
    """Return the title of the first non-hidden worksheet, or None if unknown."""
    if path.suffix.lower() not in _OPENPYXL_SUFFIXES:
        return None
    wb = openpyxl.load_workbook(path, read_only=True)
    try:
        for ws in wb.worksheets:
            if getattr(ws, "sheet_state", "visible") == "visible":
                return ws.title
        return None
    finally:
        wb.close()


def _to_cell(value: Any) -> str | None:
    text = cell_to_str(value)
    return text if text != "" else None


def read_grid(path: Path, sheet_name: str | None = None) -> list[list[str | None]]:
    """Decode a worksheet into a raw grid of trimmed string cells.

    Trailing fully blank rows are dropped. Interior blank rows are kept so the
    grid index stays aligned with the sheet row number.

    Raises:
        SpreadsheetReadError: file unreadable, not a workbook, or sheet missing
    """
    if not path.exists():
        raise SpreadsheetReadError(f"file not found: {path}")

    try:
        xls = pd.ExcelFile(path)
    except Exception as e:
        raise SpreadsheetReadError(f"cannot open workbook {path.name}: {e}") from e

    with xls:
        names = [str(n) for n in xls.sheet_names]
        if sheet_name is not None:
            if sheet_name not in names:
                raise SpreadsheetReadError(f"sheet '{sheet_name}' not found in {path.name} (sheets={names})")
            target = sheet_name
        else:
            try:
                target = first_visible_sheet(path) or names[0]
            except Exception as e:
                raise SpreadsheetReadError(f"cannot inspect sheets of {path.name}: {e}") from e

        # dtype=object keeps int ids from being upcast to float by blank cells
        df = xls.parse(target, header=None, dtype=object)

    grid = [[_to_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]
    while grid and all(c is None for c in grid[-1]):
        grid.pop()
    return grid
