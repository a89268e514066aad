from __future__ import annotations

import pytest

from sheet_orm.errors import SheetHeaderError, StorageError, TableNotFoundError
from sheet_orm.store.base import BackingStore
from sheet_orm.store.memory import InMemoryStore


def test_memory_store_satisfies_protocol():
    assert isinstance(InMemoryStore(), BackingStore)


def test_open_table_unknown_sheet():
    with pytest.raises(TableNotFoundError):
        InMemoryStore().open_table("Nope")


def test_header_is_normalized():
    store = InMemoryStore({"S": [[" ID ", None, 3], [1, 2, 3]]})
    header, rows = store.read_header_and_rows(store.open_table("S"))
    assert header == ["ID", "", "3"]
    assert rows == [[1, 2, 3]]


def test_empty_grid_has_no_header():
    store = InMemoryStore({"S": []})
    with pytest.raises(SheetHeaderError):
        store.read_header_and_rows(store.open_table("S"))


def test_rows_are_copied_in_and_out():
    row = [1, {"nested": True}]
    store = InMemoryStore()
    store.add_sheet("S", ["ID", "Meta"], [row])
    row[1]["nested"] = False
    handle = store.open_table("S")
    _, rows = store.read_header_and_rows(handle)
    assert rows[0][1] == {"nested": True}
    rows[0][0] = 99
    assert store.snapshot("S")[1][0] == 1


def test_row_operations_use_data_positions():
    store = InMemoryStore()
    store.add_sheet("S", ["ID"], [[1], [2]])
    handle = store.open_table("S")
    store.append_row(handle, [3])
    store.write_row(handle, 1, [10])
    store.delete_row(handle, 2)
    assert store.snapshot("S") == [["ID"], [10], [3]]


def test_out_of_range_positions_raise():
    store = InMemoryStore()
    store.add_sheet("S", ["ID"], [[1]])
    handle = store.open_table("S")
    with pytest.raises(StorageError):
        store.write_row(handle, 0, [9])
    with pytest.raises(StorageError):
        store.delete_row(handle, 2)


def test_clear_and_write_block():
    store = InMemoryStore()
    store.add_sheet("S", ["ID"], [[1], [2]])
    handle = store.open_table("S")
    store.clear_data_rows(handle)
    assert store.snapshot("S") == [["ID"]]
    store.write_block(handle, [[5], [6]])
    assert store.snapshot("S") == [["ID"], [5], [6]]
