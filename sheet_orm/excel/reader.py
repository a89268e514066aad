from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from ..errors import SheetHeaderError, StorageError

"""Excel sheet reader.

Row 1 of a sheet is the header, rows 2.. are data. pandas is asked for raw
object cells (header=None, dtype=object) so ints stay ints and booleans stay
booleans; NaN/NaT become None and numpy/pandas scalars become plain Python
values before anything reaches the record mapper.
"""

__all__ = [
    "SheetData",
    "list_sheet_names",
    "read_workbook",
    "normalize_sheet",
    "read_sheet",
    "to_python",
]


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[list[Any]]  # cell values aligned with columns (ragged tails allowed)


def to_python(value: Any) -> Any:
    """Convert one pandas cell to a plain Python value (None for blanks)."""
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # list-like cells are never blank
        pass
    return value


def list_sheet_names(path: Path) -> list[str]:
    try:
        with pd.ExcelFile(path) as xls:
            return [str(name) for name in xls.sheet_names]
    except FileNotFoundError as e:
        raise StorageError(f"workbook not found: {path}") from e
    except (OSError, ValueError) as e:
        raise StorageError(f"cannot open workbook {path}: {e}") from e


def read_workbook(path: Path, target_sheets: Iterable[str] | None = None) -> dict[str, pd.DataFrame]:
    """Read raw DataFrames keyed by sheet name.

    Parameters
    ----------
    path: workbook path
    target_sheets: restrict to these sheet names (None = every sheet)
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    dfs: dict[str, pd.DataFrame] = {}
    try:
        with pd.ExcelFile(path) as xls:
            for name in xls.sheet_names:
                if wanted is not None and str(name) not in wanted:
                    continue
                dfs[str(name)] = xls.parse(name, header=None, dtype=object)
    except FileNotFoundError as e:
        raise StorageError(f"workbook not found: {path}") from e
    except (OSError, ValueError) as e:
        raise StorageError(f"cannot read workbook {path}: {e}") from e
    return dfs


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Split a raw DataFrame into header labels and data rows.

    Steps:
    1. Validate at least one row exists (the header)
    2. Header labels are stripped strings of the first row; blank header cells become ""
    3. Remaining rows become data rows; fully blank rows are kept so data row
       positions match the sheet, except trailing ones past the last filled row
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    columns = []
    for cell in df.iloc[0].tolist():
        cell = to_python(cell)
        columns.append("" if cell is None else str(cell).strip())
    # trailing blank header cells are padding from wider data rows
    while columns and columns[-1] == "":
        columns.pop()

    rows: list[list[Any]] = [
        [to_python(v) for v in raw] for raw in df.iloc[1:].itertuples(index=False, name=None)
    ]
    while rows and all(v is None for v in rows[-1]):
        rows.pop()
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def read_sheet(path: Path, sheet_name: str) -> SheetData:
    dfs = read_workbook(path, target_sheets=[sheet_name])
    if sheet_name not in dfs:
        # raised by the store as TableNotFoundError; here it's a read of a vanished sheet
        raise StorageError(f"sheet '{sheet_name}' not found in {path}")
    return normalize_sheet(dfs[sheet_name], sheet_name)
