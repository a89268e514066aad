from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from ..errors import (
    DuplicateKeyError,
    NotFoundError,
    QueryError,
    RecordValidationError,
    StorageError,
)
from ..models.query_args import (
    CreateArgs,
    DeleteArgs,
    DeleteManyArgs,
    FindManyArgs,
    FindUniqueArgs,
    OrderBy,
    UpdateArgs,
    WhereCondition,
)
from ..models.schema import ColumnDefinition, TableSchema, find_primary_key
from ..store.base import BackingStore, TableHandle
from .query_engine import filter_records, find_first, matches, paginate, sort_records
from .record_mapper import apply_defaults, header_positions, record_to_row, row_to_record

"""Table model: one sheet-backed table with an in-memory record cache.

Mutation policy is write-through: every create/update/delete mutates the cache
first and then writes the affected row(s) to the backing store in the same
call. There is no rollback; if the store write fails the cache is left ahead
of the store and a StorageError propagates. load() (store wins) or save()
(cache wins) resynchronise the two.

Cache position i always corresponds to data row i + 1 in the store.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "TableModel",
]


class TableModel:
    """CRUD + query surface over one table.

    Construction validates the schema (exactly one primary key), opens the
    table, reads its header and loads every data row. Any failure aborts
    construction.
    """

    def __init__(self, store: BackingStore, name: str, schema: TableSchema) -> None:
        self._store = store
        self._name = name
        self._schema: dict[str, ColumnDefinition] = dict(schema)
        self._primary_key = find_primary_key(self._schema, name)
        self._handle: TableHandle = store.open_table(name)
        self._header: list[str] = []
        self._records: list[dict[str, Any]] = []
        self.load()

    # --- introspection -------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def schema(self) -> Mapping[str, ColumnDefinition]:
        return MappingProxyType(self._schema)

    @property
    def primary_key(self) -> str:
        return self._primary_key

    @property
    def header(self) -> list[str]:
        return list(self._header)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"TableModel(name={self._name!r}, records={len(self._records)})"

    # --- sync ------------------------------------------------------------

    def load(self) -> None:
        """Discard the cache and rebuild it from the store (store wins)."""
        header, rows = self._store.read_header_and_rows(self._handle)
        positions = header_positions(header)
        records = [row_to_record(row, self._schema, header, positions) for row in rows]
        missing = [d.column for d in self._schema.values() if d.column not in positions]
        if missing:
            logger.debug("table=%s columns not in header (skipped): %s", self._name, missing)
        self._header = header
        self._records = records
        logger.debug("table=%s loaded rows=%d", self._name, len(records))

    def save(self) -> None:
        """Rewrite every data row in the store from the cache (cache wins)."""
        rows = [record_to_row(r, self._schema, self._header) for r in self._records]
        self._store.clear_data_rows(self._handle)
        self._store.write_block(self._handle, rows)
        logger.debug("table=%s saved rows=%d", self._name, len(rows))

    # --- reads -----------------------------------------------------------

    def list_records(self) -> list[dict[str, Any]]:
        """Every cached record, in sheet row order.

        Returns:
            Deep copies; changing them does not touch the cache
        """
        return copy.deepcopy(self._records)

    def get(self, key: Any) -> dict[str, Any] | None:
        """Record whose primary key equals ``key``, or None."""
        found = find_first(self._records, {self._primary_key: {"equals": key}})
        return copy.deepcopy(found[1]) if found else None

    def find(self, where: WhereCondition | None = None) -> list[dict[str, Any]]:
        """Records matching ``where``, in sheet row order.

        Args:
            where: field -> literal or operator mapping; None matches everything

        Returns:
            Copies of the matching records
        """
        return copy.deepcopy(filter_records(self._records, where))

    def find_many(
        self,
        where: WhereCondition | FindManyArgs | None = None,
        order_by: OrderBy | None = None,
        take: int | None = None,
        skip: int | None = None,
    ) -> list[dict[str, Any]]:
        """Filter, then sort, then paginate the cached records.

        Args:
            where: filter condition, or a FindManyArgs holding every argument
            order_by: (field, "asc"|"desc") pairs or an ordered mapping
            take: keep at most this many records (<= 0 keeps none)
            skip: drop this many records first (negative counts as 0)

        Returns:
            Copies of the selected records

        Raises:
            QueryError: an order_by direction is not "asc" or "desc"
        """
        if isinstance(where, FindManyArgs):
            where, order_by, take, skip = where.where, where.order_by, where.take, where.skip
        result = filter_records(self._records, where)
        result = sort_records(result, order_by)
        result = paginate(result, take=take, skip=skip)
        return copy.deepcopy(result)

    def find_unique(self, where: WhereCondition | FindUniqueArgs) -> dict[str, Any] | None:
        """First record matching ``where`` (or FindUniqueArgs.where), or None."""
        if isinstance(where, FindUniqueArgs):
            where = where.where
        found = find_first(self._records, where)
        return copy.deepcopy(found[1]) if found else None

    find_first = find_unique

    def count(
        self,
        where: WhereCondition | FindManyArgs | None = None,
        order_by: OrderBy | None = None,
        take: int | None = None,
        skip: int | None = None,
    ) -> int:
        """Number of records find_many() would return for the same arguments."""
        if isinstance(where, FindManyArgs):
            where, take, skip = where.where, where.take, where.skip
        # ordering cannot change the count
        return len(paginate(filter_records(self._records, where), take=take, skip=skip))

    # --- writes ----------------------------------------------------------

    def create(self, data: Mapping[str, Any] | CreateArgs) -> dict[str, Any]:
        """Insert a record; defaults fill missing/None fields.

        Args:
            data: field values, or a CreateArgs wrapping them

        Returns:
            Copy of the stored record, defaults included

        Raises:
            RecordValidationError: unknown field, or None in the primary key or
                another non-nullable field
            DuplicateKeyError: the primary key value is already present
            StorageError: the row could not be appended (the cache keeps the record)
        """
        if isinstance(data, CreateArgs):
            data = data.data
        self._check_fields(data)
        # constant defaults may be mutable; the cache never shares them
        record = copy.deepcopy(apply_defaults(data, self._schema))
        self._check_nullability(record)

        key = record[self._primary_key]
        if self._position_of_key(key) is not None:
            raise DuplicateKeyError(self._name, self._primary_key, key)

        self._records.append(record)
        position = len(self._records)
        self._write_through("create", position, lambda: self._store.append_row(
            self._handle, record_to_row(record, self._schema, self._header)
        ))
        logger.debug("table=%s created %s=%r", self._name, self._primary_key, key)
        return copy.deepcopy(record)

    def update(
        self,
        where: WhereCondition | UpdateArgs,
        data: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Merge ``data`` over the first record matching ``where`` and rewrite its row.

        The primary key is not re-checked for uniqueness if ``data`` changes it.

        Args:
            where: condition locating the record, or an UpdateArgs holding both arguments
            data: fields to overwrite

        Returns:
            Copy of the updated record

        Raises:
            QueryError: no ``data`` was given
            NotFoundError: nothing matches ``where``
            RecordValidationError: unknown field, or None in the primary key or
                another non-nullable field
            StorageError: the row could not be rewritten (the cache keeps the update)
        """
        if isinstance(where, UpdateArgs):
            where, data = where.where, where.data
        if data is None:
            raise QueryError(f"update on table '{self._name}': data is required")
        self._check_fields(data)
        index, existing = self._require_match(where, "update")
        # only fields being written are checked; rows loaded from the sheet may already hold blanks
        self._check_nullability(data, only=data.keys())
        updated = {**existing, **copy.deepcopy(dict(data))}

        self._records[index] = updated
        position = index + 1
        self._write_through("update", position, lambda: self._store.write_row(
            self._handle, position, record_to_row(updated, self._schema, self._header)
        ))
        logger.debug("table=%s updated row=%d", self._name, position)
        return copy.deepcopy(updated)

    def delete(self, where: WhereCondition | DeleteArgs) -> dict[str, Any]:
        """Remove the first record matching ``where`` and its row.

        Args:
            where: condition locating the record, or a DeleteArgs wrapping it

        Returns:
            The removed record

        Raises:
            NotFoundError: nothing matches ``where``
            StorageError: the row could not be deleted (the cache no longer holds it)
        """
        if isinstance(where, DeleteArgs):
            where = where.where
        index, existing = self._require_match(where, "delete")
        del self._records[index]
        position = index + 1
        self._write_through("delete", position, lambda: self._store.delete_row(self._handle, position))
        logger.debug("table=%s deleted row=%d", self._name, position)
        return existing

    def delete_many(self, where: WhereCondition | DeleteManyArgs | None = None) -> int:
        """Remove every matching record; returns how many were removed.

        Rows are removed from the bottom up so earlier positions stay valid. A
        StorageError midway leaves the rows already processed deleted.
        """
        if isinstance(where, DeleteManyArgs):
            where = where.where
        indices = [i for i, r in enumerate(self._records) if matches(r, where)]
        for index in reversed(indices):
            del self._records[index]
            position = index + 1
            self._write_through(
                "delete_many", position, lambda: self._store.delete_row(self._handle, position)
            )
        logger.debug("table=%s delete_many removed=%d", self._name, len(indices))
        return len(indices)

    # --- helpers ---------------------------------------------------------

    def _position_of_key(self, key: Any) -> int | None:
        found = find_first(self._records, {self._primary_key: {"equals": key}})
        return found[0] if found else None

    def _require_match(self, where: WhereCondition, operation: str) -> tuple[int, dict[str, Any]]:
        found = find_first(self._records, where)
        if found is None:
            raise NotFoundError(f"{operation}: no record in table '{self._name}' matches {dict(where)!r}")
        return found

    def _check_fields(self, data: Mapping[str, Any]) -> None:
        unknown = sorted(str(k) for k in data if k not in self._schema)
        if unknown:
            raise RecordValidationError(f"table '{self._name}': unknown field(s) {unknown}")

    def _check_nullability(self, record: Mapping[str, Any], only: Iterable[str] | None = None) -> None:
        fields = set(only) if only is not None else None
        # the primary key is never nullable, whatever its definition says
        missing = [
            field for field, definition in self._schema.items()
            if (not definition.nullable or field == self._primary_key)
            and (fields is None or field in fields)
            and record.get(field) is None
        ]
        if missing:
            raise RecordValidationError(
                f"table '{self._name}': field(s) {missing} may not be null"
            )

    def _write_through(self, operation: str, position: int, write: Callable[[], None]) -> None:
        try:
            write()
        except StorageError:
            logger.warning(
                "table=%s %s row=%d: store write failed; cache is ahead of the store",
                self._name, operation, position,
            )
            raise
