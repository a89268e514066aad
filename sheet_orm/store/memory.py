from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ..errors import SheetHeaderError, StorageError, TableNotFoundError
from .base import TableHandle

"""In-memory backing store.

Each sheet is a grid (list of rows, row 0 = header). Values are deep-copied on
the way in and out so nothing outside the store can alias a stored row.
"""

__all__ = [
    "InMemoryStore",
]


class InMemoryStore:
    """Grid-per-sheet store used for tests and throwaway clients."""

    def __init__(
        self,
        sheets: Mapping[str, Iterable[Sequence[Any]]] | None = None,
        identifier: str = "memory",
    ) -> None:
        self.identifier = identifier
        self._sheets: dict[str, list[list[Any]]] = {}
        for name, grid in (sheets or {}).items():
            self._sheets[name] = [list(row) for row in copy.deepcopy(list(grid))]

    def add_sheet(self, name: str, header: Sequence[str], rows: Iterable[Sequence[Any]] = ()) -> None:
        self._sheets[name] = [list(header)] + [list(r) for r in copy.deepcopy(list(rows))]

    def snapshot(self, name: str) -> list[list[Any]]:
        """Full grid (header included) of a sheet, as a copy."""
        return copy.deepcopy(self._grid(name))

    def open_table(self, name: str) -> TableHandle:
        if name not in self._sheets:
            raise TableNotFoundError(name, f"no such sheet in store '{self.identifier}'")
        return TableHandle(identifier=self.identifier, name=name)

    def read_header_and_rows(self, handle: TableHandle) -> tuple[list[str], list[list[Any]]]:
        grid = self._grid(handle.name)
        if not grid:
            raise SheetHeaderError(f"sheet '{handle.name}' has no header row")
        header = ["" if c is None else str(c).strip() for c in grid[0]]
        return header, copy.deepcopy(grid[1:])

    def append_row(self, handle: TableHandle, values: Sequence[Any]) -> None:
        self._grid(handle.name).append(copy.deepcopy(list(values)))

    def write_row(self, handle: TableHandle, position: int, values: Sequence[Any]) -> None:
        grid = self._grid(handle.name)
        self._check_position(handle, grid, position)
        grid[position] = copy.deepcopy(list(values))

    def delete_row(self, handle: TableHandle, position: int) -> None:
        grid = self._grid(handle.name)
        self._check_position(handle, grid, position)
        del grid[position]

    def clear_data_rows(self, handle: TableHandle) -> None:
        del self._grid(handle.name)[1:]

    def write_block(self, handle: TableHandle, rows: Sequence[Sequence[Any]]) -> None:
        self._grid(handle.name).extend(copy.deepcopy([list(r) for r in rows]))

    def _grid(self, name: str) -> list[list[Any]]:
        try:
            return self._sheets[name]
        except KeyError:
            raise TableNotFoundError(name, f"no such sheet in store '{self.identifier}'") from None

    @staticmethod
    def _check_position(handle: TableHandle, grid: list[list[Any]], position: int) -> None:
        # grid[0] is the header, so data position N is grid[N]
        if position < 1 or position >= len(grid):
            raise StorageError(
                f"sheet '{handle.name}': data row {position} out of range (1..{len(grid) - 1})"
            )
