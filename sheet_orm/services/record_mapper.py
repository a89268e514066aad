from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..errors import RecordValidationError
from ..models.schema import TableSchema

"""Record mapper: raw sheet rows <-> typed records.

Row layout follows the header read from the sheet, not the schema's field
order. Labels missing from the header are skipped on read; header positions no
field maps to are written back as "".
"""

__all__ = [
    "EMPTY_CELL",
    "header_positions",
    "row_to_record",
    "record_to_row",
    "apply_defaults",
]

EMPTY_CELL = ""


def header_positions(header: Sequence[str]) -> dict[str, int]:
    """Label -> position. The first occurrence of a duplicated label wins."""
    positions: dict[str, int] = {}
    for index, label in enumerate(header):
        positions.setdefault(label, index)
    return positions


def row_to_record(
    row: Sequence[Any],
    schema: TableSchema,
    header: Sequence[str],
    positions: Mapping[str, int] | None = None,
) -> dict[str, Any]:
    """Build a typed record from one data row.

    ``positions`` may be passed in to avoid recomputing the header lookup for
    every row of a load.

    Raises:
        RecordValidationError: a column parser rejected the stored value.
    """
    if positions is None:
        positions = header_positions(header)
    record: dict[str, Any] = {}
    for field, definition in schema.items():
        index = positions.get(definition.column)
        if index is None:
            continue
        raw = row[index] if index < len(row) else None
        if raw is not None and definition.parser is not None:
            try:
                raw = definition.parser(raw)
            except (TypeError, ValueError) as e:
                raise RecordValidationError(
                    f"field '{field}' (column '{definition.column}'): cannot parse {raw!r}: {e}"
                ) from e
        record[field] = raw
    return record


def record_to_row(
    record: Mapping[str, Any],
    schema: TableSchema,
    header: Sequence[str],
) -> list[Any]:
    """Serialize ``record`` into a row aligned with ``header``."""
    by_label: dict[str, str] = {}
    for field, definition in schema.items():
        by_label.setdefault(definition.column, field)

    row: list[Any] = []
    for label in header:
        field = by_label.get(label)
        if field is None:
            row.append(EMPTY_CELL)
            continue
        value = record.get(field)
        serializer = schema[field].serializer
        if value is not None and serializer is not None:
            value = serializer(value)
        row.append(value)
    return row


def apply_defaults(partial: Mapping[str, Any], schema: TableSchema) -> dict[str, Any]:
    """Return a copy of ``partial`` with defaults filled for missing/None fields.

    Generator defaults are invoked on every call; present non-null values are
    never overwritten.
    """
    record = dict(partial)
    for field, definition in schema.items():
        if definition.default is not None and record.get(field) is None:
            record[field] = definition.default.resolve()
    return record
