from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Config dataclasses for sheet_orm clients.

These are the typed form of config/sheet_orm.yml; sheet_orm.config.loader
fills them after JSON-schema validation. Column entries stay declarative here (kind
names, factory names); config.loader.build_schema turns them into
ColumnDefinitions.
"""

__all__ = [
    "ColumnConfig",
    "TableConfig",
    "ClientConfig",
]


@dataclass(frozen=True)
class ColumnConfig:
    """One field entry under tables.<name>.columns."""
    field: str  # record key
    column: str  # header label
    kind: str = "string"  # string | number | boolean | date | custom
    primary_key: bool = False
    nullable: bool = True
    default: Any = None  # constant default
    default_factory: str | None = None  # now | today | uuid4
    codec: str | None = None  # json


@dataclass(frozen=True)
class TableConfig:
    """One table (== sheet) and its columns, in declaration order."""
    name: str
    columns: list[ColumnConfig] = field(default_factory=list)


@dataclass(frozen=True)
class ClientConfig:
    """Root configuration: which workbook, which tables."""
    workbook: str  # path to the .xlsx file
    tables: dict[str, TableConfig]
    strict: bool = True  # undeclared table access raises
    log_level: str = "INFO"
