from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

"""Backing store contract required by the table model.

A store exposes named tables laid out as one header row followed by data rows.
Data rows are addressed by 1-based position; physical row = position + HEADER_OFFSET.
Deleting a row shifts every later row up by one, so bulk deletes must run in
descending position order.
"""

__all__ = [
    "HEADER_OFFSET",
    "TableHandle",
    "BackingStore",
]

HEADER_OFFSET = 1


@dataclass(frozen=True)
class TableHandle:
    """Opaque reference to one table inside a store."""
    identifier: str  # workbook path / store id
    name: str  # sheet name


@runtime_checkable
class BackingStore(Protocol):
    identifier: str

    def open_table(self, name: str) -> TableHandle:
        """Raises TableNotFoundError when no such table exists."""
        ...

    def read_header_and_rows(self, handle: TableHandle) -> tuple[list[str], list[list[Any]]]: ...

    def append_row(self, handle: TableHandle, values: Sequence[Any]) -> None: ...

    def write_row(self, handle: TableHandle, position: int, values: Sequence[Any]) -> None: ...

    def delete_row(self, handle: TableHandle, position: int) -> None: ...

    def clear_data_rows(self, handle: TableHandle) -> None: ...

    def write_block(self, handle: TableHandle, rows: Sequence[Sequence[Any]]) -> None: ...
