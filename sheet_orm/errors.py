from __future__ import annotations

from typing import Any

"""Error taxonomy shared by the schema, mapping, query and storage layers.

Every error raised by sheet_orm derives from SheetOrmError so callers can catch
the whole family at once. Lookup failures also derive from LookupError and
caller contract violations from ValueError.
"""

__all__ = [
    "SheetOrmError",
    "SchemaError",
    "NotFoundError",
    "TableNotFoundError",
    "DuplicateKeyError",
    "StorageError",
    "SheetHeaderError",
    "RecordValidationError",
    "QueryError",
]


class SheetOrmError(Exception):
    """Base class for every sheet_orm error."""


class SchemaError(SheetOrmError, ValueError):
    """Raised when a table schema is malformed (e.g. zero or multiple primary keys)."""


class NotFoundError(SheetOrmError, LookupError):
    """Raised when update/delete target no record."""


class TableNotFoundError(NotFoundError):
    """Raised when a named sheet is missing or a table name was never declared."""

    def __init__(self, table: str, detail: str | None = None) -> None:
        self.table = table
        message = f"table '{table}' not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DuplicateKeyError(SheetOrmError, ValueError):
    """Raised by create() when the primary key value is already cached."""

    def __init__(self, table: str, field: str, value: Any) -> None:
        self.table = table
        self.field = field
        self.value = value
        super().__init__(f"table '{table}': record with {field}={value!r} already exists")


class StorageError(SheetOrmError):
    """Backing store I/O failure. Propagated as-is, never retried."""


class SheetHeaderError(StorageError):
    """Raised when a sheet has no header row."""


class RecordValidationError(SheetOrmError, ValueError):
    """Raised when mutation data names unknown fields or nulls a non-nullable one."""


class QueryError(SheetOrmError, ValueError):
    """Raised for malformed query arguments (sort direction, JSON query shape)."""
