from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..errors import StorageError, TableNotFoundError
from ..store.base import HEADER_OFFSET, TableHandle
from .reader import list_sheet_names, read_sheet

"""Excel workbook (.xlsx) backing store.

Reads go through excel.reader (pandas). Every write reads the target sheet,
edits the grid and rewrites that one sheet in place with
pandas.ExcelWriter(mode="a", if_sheet_exists="replace"); other sheets are left
untouched and the sheet keeps its position in the workbook.

Blank rows between data rows are read as all-None rows, so data row N of the
cache is always row N of the sheet. Only blank rows after the last filled row
are dropped, on read and therefore on the next write.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ExcelWorkbookStore",
    "create_workbook",
]

ENGINE = "openpyxl"


def _frame(grid: Sequence[Sequence[Any]]) -> pd.DataFrame:
    return pd.DataFrame([list(row) for row in grid], dtype=object)


def create_workbook(path: Path, sheets: Mapping[str, Sequence[Sequence[Any]]]) -> Path:
    """Write a new workbook; each sheet is a grid whose first row is the header."""
    path = Path(path)
    try:
        with pd.ExcelWriter(path, engine=ENGINE, mode="w") as writer:
            for name, grid in sheets.items():
                _frame(grid).to_excel(writer, sheet_name=name, header=False, index=False)
    except (OSError, ValueError) as e:
        raise StorageError(f"cannot create workbook {path}: {e}") from e
    return path


class ExcelWorkbookStore:
    """BackingStore over one .xlsx file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.identifier = str(self.path)

    def open_table(self, name: str) -> TableHandle:
        if name not in list_sheet_names(self.path):
            raise TableNotFoundError(name, f"no such sheet in workbook {self.path}")
        return TableHandle(identifier=self.identifier, name=name)

    def read_header_and_rows(self, handle: TableHandle) -> tuple[list[str], list[list[Any]]]:
        sheet = read_sheet(self.path, handle.name)
        return sheet.columns, sheet.rows

    def append_row(self, handle: TableHandle, values: Sequence[Any]) -> None:
        grid = self._read_grid(handle)
        grid.append(list(values))
        self._write_grid(handle, grid)

    def write_row(self, handle: TableHandle, position: int, values: Sequence[Any]) -> None:
        grid = self._read_grid(handle)
        grid[self._index(handle, grid, position)] = list(values)
        self._write_grid(handle, grid)

    def delete_row(self, handle: TableHandle, position: int) -> None:
        grid = self._read_grid(handle)
        del grid[self._index(handle, grid, position)]
        self._write_grid(handle, grid)

    def clear_data_rows(self, handle: TableHandle) -> None:
        grid = self._read_grid(handle)
        self._write_grid(handle, grid[:HEADER_OFFSET])

    def write_block(self, handle: TableHandle, rows: Sequence[Sequence[Any]]) -> None:
        grid = self._read_grid(handle)
        grid.extend(list(r) for r in rows)
        self._write_grid(handle, grid)

    def _read_grid(self, handle: TableHandle) -> list[list[Any]]:
        sheet = read_sheet(self.path, handle.name)
        return [list(sheet.columns)] + sheet.rows

    def _write_grid(self, handle: TableHandle, grid: list[list[Any]]) -> None:
        try:
            with pd.ExcelWriter(
                self.path, engine=ENGINE, mode="a", if_sheet_exists="replace"
            ) as writer:
                _frame(grid).to_excel(writer, sheet_name=handle.name, header=False, index=False)
        except (OSError, ValueError, TypeError) as e:
            raise StorageError(f"cannot write sheet '{handle.name}' in {self.path}: {e}") from e
        logger.debug("wrote sheet=%s rows=%d", handle.name, len(grid) - HEADER_OFFSET)

    @staticmethod
    def _index(handle: TableHandle, grid: list[list[Any]], position: int) -> int:
        index = position - 1 + HEADER_OFFSET
        if position < 1 or index >= len(grid):
            raise StorageError(
                f"sheet '{handle.name}': data row {position} out of range "
                f"(1..{len(grid) - HEADER_OFFSET})"
            )
        return index
