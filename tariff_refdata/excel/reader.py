from __future__ import annotations

import io
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd

from ..models.import_result import ImportAbortedError

"""Workbook reader: first worksheet -> RawSheet.

The first row is the header row, every following row is a data row. Cells are
returned as plain Python values with blank cells as None. NA-like strings
("NA", "N/A", "-") are kept as text so that coercion decides what they mean
per field type.
"""

__all__ = [
    "RawSheet",
    "WorkbookSource",
    "SheetFormatError",
    "read_workbook",
    "check_sheet_shape",
]

RawSheet = list[list[Any]]

WorkbookSource = str | Path | bytes | BinaryIO


class SheetFormatError(ImportAbortedError):
    """Raised when a workbook cannot be read or lacks a header row and a data row."""
    issue_type = "SHEET_FORMAT"


def read_workbook(source: WorkbookSource, sheet: int | str = 0) -> RawSheet:
    """Read one worksheet without header inference.

    Parameters
    ----------
    source: workbook path, raw bytes (uploaded file) or binary file object
    sheet: worksheet index or name (default: first sheet)

    Raises:
        SheetFormatError: If the workbook cannot be opened or parsed
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        df = pd.read_excel(source, sheet_name=sheet, header=None, dtype=object, keep_default_na=False)
    except Exception as e:  # pandas / openpyxl / zipfile raise unrelated types
        raise SheetFormatError(f"Unable to read spreadsheet: {e}") from e
    return _frame_to_rows(df)


def _frame_to_rows(df: pd.DataFrame) -> RawSheet:
    rows: RawSheet = []
    for raw in df.itertuples(index=False, name=None):
        rows.append([None if _is_na(v) else v for v in raw])
    return rows


def _is_na(value: Any) -> bool:
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):  # array-like cell values
        return False


def check_sheet_shape(rows: RawSheet) -> None:
    """Validate that a header row and at least one data row exist."""
    if len(rows) < 2:
        raise SheetFormatError(
            "Spreadsheet must contain a header row and at least one data row"
        )
