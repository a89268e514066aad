from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from ..errors import TableNotFoundError
from ..excel.workbook_store import ExcelWorkbookStore
from ..models.schema import TableSchema, define_schema, define_table
from ..store.base import BackingStore
from .table_model import TableModel

"""Client: table name -> TableModel registry built from a schema of schemas.

Tables are reached through get(name) or client[name]; there is no attribute
magic. Each declared table name is also its sheet name.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "SpreadsheetClient",
    "create_client",
    "create_sheet_client",
    "open_store",
]


def open_store(store_or_path: BackingStore | str | Path) -> BackingStore:
    """Pass stores through; wrap a workbook path in an ExcelWorkbookStore."""
    if isinstance(store_or_path, (str, Path)):
        return ExcelWorkbookStore(store_or_path)
    return store_or_path


class SpreadsheetClient:
    """One TableModel per declared table, all sharing one backing store.

    With ``strict`` (default) get() raises TableNotFoundError for undeclared
    names; otherwise it returns None. Indexing always raises.
    """

    def __init__(
        self,
        store: BackingStore,
        schema: Mapping[str, TableSchema],
        *,
        strict: bool = True,
    ) -> None:
        self.store = store
        self.strict = strict
        self._models: dict[str, TableModel] = {}
        for table_name, table_schema in define_schema(schema).items():
            self._models[table_name] = TableModel(store, table_name, table_schema)
        logger.debug("client store=%s tables=%s", store.identifier, list(self._models))

    @property
    def models(self) -> Mapping[str, TableModel]:
        """Read-only view of table name -> TableModel, in declaration order."""
        return MappingProxyType(self._models)

    @property
    def table_names(self) -> list[str]:
        """Declared table names, in declaration order."""
        return list(self._models)

    def get(self, name: str) -> TableModel | None:
        """Look up the model of a declared table.

        Args:
            name: table (and sheet) name

        Returns:
            The TableModel, or None for an undeclared name when not strict

        Raises:
            TableNotFoundError: undeclared name on a strict client
        """
        model = self._models.get(name)
        if model is None and self.strict:
            raise TableNotFoundError(name, "not declared in schema")
        return model

    def load_all(self) -> None:
        """Reload every table from the store, discarding the caches."""
        for model in self._models.values():
            model.load()

    def __getitem__(self, name: str) -> TableModel:
        try:
            return self._models[name]
        except KeyError:
            raise TableNotFoundError(name, "not declared in schema") from None

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)


def create_client(
    store_or_path: BackingStore | str | Path,
    schema: Mapping[str, TableSchema],
    *,
    strict: bool = True,
) -> SpreadsheetClient:
    """Build a client over a backing store or an .xlsx path.

    Args:
        store_or_path: a BackingStore, or a workbook path wrapped in ExcelWorkbookStore
        schema: table name -> table schema; each table name is also its sheet name
        strict: whether get() raises for undeclared table names

    Returns:
        SpreadsheetClient with every table loaded

    Raises:
        SchemaError: a table schema is malformed or lacks a single primary key
        TableNotFoundError: a declared table has no sheet
        StorageError: the store could not be read
    """
    return SpreadsheetClient(open_store(store_or_path), schema, strict=strict)


def create_sheet_client(
    store_or_path: BackingStore | str | Path,
    sheet_name: str,
    schema: TableSchema,
) -> TableModel:
    """Single-table form: a TableModel bound to one sheet."""
    return TableModel(open_store(store_or_path), sheet_name, define_table(schema))
