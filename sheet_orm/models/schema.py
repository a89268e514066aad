from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

import pandas as pd

from ..errors import SchemaError

"""Schema model: declarative column definitions for a sheet-backed table.

A table schema is a plain mapping of field name -> ColumnDefinition. Field names
are the keys of in-memory records; ColumnDefinition.column is the header label
in the sheet. Nothing here touches storage.
"""

__all__ = [
    "ColumnKind",
    "Constant",
    "Generator",
    "Default",
    "ColumnDefinition",
    "TableSchema",
    "column",
    "string_column",
    "number_column",
    "boolean_column",
    "date_column",
    "custom_column",
    "define_table",
    "define_schema",
    "find_primary_key",
    "parse_date",
    "serialize_date",
]


class ColumnKind(Enum):
    """Declared value kind of a column.

    Only DATE carries default transforms; CUSTOM is for application types
    (enums, JSON blobs, ...) that bring their own parser/serializer.
    """
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Constant:
    """Default used as-is."""
    value: Any

    def resolve(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Generator:
    """Default produced by calling a zero-argument factory on every use."""
    factory: Callable[[], Any]

    def resolve(self) -> Any:
        return self.factory()


Default = Constant | Generator


@dataclass(frozen=True)
class ColumnDefinition:
    """Column metadata for one schema field."""
    column: str  # header label in the sheet
    kind: ColumnKind = ColumnKind.CUSTOM
    primary_key: bool = False
    nullable: bool = True
    default: Default | None = None
    parser: Callable[[Any], Any] | None = None  # raw cell -> typed value
    serializer: Callable[[Any], Any] | None = None  # typed value -> raw cell


TableSchema = Mapping[str, ColumnDefinition]


def _as_default(value: Any) -> Default | None:
    if value is None or isinstance(value, (Constant, Generator)):
        return value
    if callable(value):
        return Generator(value)
    return Constant(value)


def parse_date(value: Any) -> Any:
    """Coerce a stored cell value to a date/datetime unless it already is one.

    ISO-8601 text (including a trailing 'Z') round-trips exactly; a pure date
    string ('2024-01-31') parses to a date. Numbers are epoch milliseconds.
    Other text falls back to pandas' parser.
    """
    # Timestamp subclasses datetime, so it is unwrapped first
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return pd.to_datetime(value, unit="ms", utc=True).to_pydatetime()
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return pd.to_datetime(text).to_pydatetime()
    if len(text) == 10:
        return parsed.date()
    return parsed


def serialize_date(value: Any) -> Any:
    """Render a date/datetime as canonical ISO-8601 text (aware values in UTC, 'Z' suffix)."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(UTC).isoformat().replace("+00:00", "Z")
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def column(label: str, kind: ColumnKind = ColumnKind.CUSTOM, **options: Any) -> ColumnDefinition:
    """Build a ColumnDefinition; ``options`` override any attribute.

    ``default`` may be a constant, a zero-argument callable or an explicit
    Constant/Generator. A primary-key column is non-nullable unless
    ``nullable`` is given explicitly.
    """
    if options.get("primary_key"):
        options.setdefault("nullable", False)
    if "default" in options:
        options["default"] = _as_default(options["default"])
    try:
        return ColumnDefinition(column=label, kind=kind, **options)
    except TypeError as e:
        raise SchemaError(f"invalid column options for '{label}': {e}") from e


def string_column(label: str, **options: Any) -> ColumnDefinition:
    return column(label, ColumnKind.STRING, **options)


def number_column(label: str, **options: Any) -> ColumnDefinition:
    return column(label, ColumnKind.NUMBER, **options)


def boolean_column(label: str, **options: Any) -> ColumnDefinition:
    return column(label, ColumnKind.BOOLEAN, **options)


def date_column(label: str, **options: Any) -> ColumnDefinition:
    base = column(label, ColumnKind.DATE, parser=parse_date, serializer=serialize_date)
    if not options:
        return base
    if options.get("primary_key"):
        options.setdefault("nullable", False)
    if "default" in options:
        options["default"] = _as_default(options["default"])
    try:
        return replace(base, **options)
    except TypeError as e:
        raise SchemaError(f"invalid column options for '{label}': {e}") from e


def custom_column(label: str, **options: Any) -> ColumnDefinition:
    return column(label, ColumnKind.CUSTOM, **options)


def define_table(fields: Mapping[str, ColumnDefinition]) -> dict[str, ColumnDefinition]:
    """Check the shape of a table schema and return it as an ordered dict.

    Primary-key cardinality is checked later by the table model, before any
    data is loaded.
    """
    table: dict[str, ColumnDefinition] = {}
    for name, definition in fields.items():
        if not isinstance(name, str) or not name:
            raise SchemaError(f"field names must be non-empty strings, got {name!r}")
        if not isinstance(definition, ColumnDefinition):
            raise SchemaError(
                f"field '{name}': expected ColumnDefinition, got {type(definition).__name__}"
            )
        table[name] = definition
    return table


def define_schema(
    tables: Mapping[str, Mapping[str, ColumnDefinition]],
) -> dict[str, dict[str, ColumnDefinition]]:
    """Schema of schemas: table name -> table schema."""
    return {str(name): define_table(fields) for name, fields in tables.items()}


def find_primary_key(schema: TableSchema, table: str = "<table>") -> str:
    """Return the single primary-key field of ``schema``.

    Raises:
        SchemaError: zero or more than one primary-key column is declared.
    """
    keys = [name for name, definition in schema.items() if definition.primary_key]
    if not keys:
        raise SchemaError(f"table '{table}' declares no primary key column")
    if len(keys) > 1:
        raise SchemaError(f"table '{table}' declares multiple primary key columns: {keys}")
    return keys[0]
