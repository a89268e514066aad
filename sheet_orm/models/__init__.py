"""Domain models for sheet_orm.

Schema definitions (data only), query argument shapes and config dataclasses.
"""

from .config_models import ClientConfig, ColumnConfig, TableConfig
from .query_args import (
    CreateArgs,
    DeleteArgs,
    DeleteManyArgs,
    FindManyArgs,
    FindUniqueArgs,
    UpdateArgs,
)
from .schema import (
    ColumnDefinition,
    ColumnKind,
    Constant,
    Generator,
    boolean_column,
    column,
    custom_column,
    date_column,
    define_schema,
    define_table,
    find_primary_key,
    number_column,
    string_column,
)

__all__ = [
    # Configuration models
    "ClientConfig",
    "ColumnConfig",
    "TableConfig",
    # Query arguments
    "CreateArgs",
    "DeleteArgs",
    "DeleteManyArgs",
    "FindManyArgs",
    "FindUniqueArgs",
    "UpdateArgs",
    # Schema
    "ColumnDefinition",
    "ColumnKind",
    "Constant",
    "Generator",
    "boolean_column",
    "column",
    "custom_column",
    "date_column",
    "define_schema",
    "define_table",
    "find_primary_key",
    "number_column",
    "string_column",
]
