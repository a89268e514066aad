from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from sheet_orm.errors import QueryError
from sheet_orm.services.query_engine import (
    compare_values,
    filter_records,
    find_first,
    match_field,
    matches,
    normalize_order_by,
    paginate,
    sort_records,
)

USERS = [
    {"id": 1, "name": "Ann", "age": 30, "is_active": True},
    {"id": 2, "name": "Bob", "age": 17, "is_active": False},
    {"id": 3, "name": "Cid", "age": 45, "is_active": False},
]


def test_literal_and_operator_filters():
    assert [u["id"] for u in filter_records(USERS, {"is_active": True})] == [1]
    assert [u["id"] for u in filter_records(USERS, {"age": {"gte": 18}})] == [1, 3]
    assert [u["id"] for u in filter_records(USERS, {"age": {"gt": 18, "lt": 40}})] == [1]
    assert [u["id"] for u in filter_records(USERS, {"id": {"in": [1, 3]}})] == [1, 3]
    assert [u["id"] for u in filter_records(USERS, {"id": {"notIn": [1, 3]}})] == [2]
    assert [u["id"] for u in filter_records(USERS, {"name": {"not": "Bob"}})] == [1, 3]


def test_text_operators():
    assert [u["id"] for u in filter_records(USERS, {"name": {"contains": "o"}})] == [2]
    assert [u["id"] for u in filter_records(USERS, {"name": {"startsWith": "C"}})] == [3]
    assert [u["id"] for u in filter_records(USERS, {"name": {"endsWith": "n"}})] == [1]


def test_empty_or_missing_where_matches_everything():
    assert filter_records(USERS, None) == USERS
    assert filter_records(USERS, {}) == USERS
    assert filter_records([], {"id": 1}) == []


def test_filter_returns_new_list():
    result = filter_records(USERS)
    assert result == USERS
    assert result is not USERS


def test_null_condition_matches_none_or_absent():
    records = [{"id": 1, "note": None}, {"id": 2}, {"id": 3, "note": "x"}]
    assert [r["id"] for r in filter_records(records, {"note": None})] == [1, 2]
    assert [r["id"] for r in filter_records(records, {"note": {"equals": None}})] == [1, 2]


def test_booleans_never_equal_numbers():
    assert not match_field(True, 1)
    assert not match_field(0, False)
    assert not match_field(1, {"in": [True]})
    assert match_field(True, True)
    assert match_field(1, 1.0)


def test_ordering_operators_fail_closed_on_mismatched_types():
    assert not match_field("10", {"gt": 5})
    assert not match_field(None, {"lt": 5})
    assert not match_field(True, {"gte": 0})
    assert not match_field(5, {"contains": "5"})
    assert not match_field(None, {"startsWith": ""})
    assert not match_field(1, {"in": "123"})


def test_temporal_comparisons():
    created = datetime(2024, 3, 1, 12, 0)
    assert match_field(created, {"gte": date(2024, 3, 1)})
    assert match_field(created, {"lt": datetime(2024, 3, 2)})
    assert not match_field(date(2024, 3, 1), {"gt": datetime(2024, 3, 1)})
    # naive against aware is a non-match, not an error
    assert not match_field(created, {"lt": datetime(2030, 1, 1, tzinfo=UTC)})


def test_literal_mapping_compared_by_value():
    records = [{"id": 1, "meta": {"tier": "gold"}}, {"id": 2, "meta": {"tier": "silver"}}]
    assert [r["id"] for r in filter_records(records, {"meta": {"tier": "gold"}})] == [1]


def test_predicate_operators_are_anded():
    assert matches(USERS[0], {"age": {"gte": 18, "in": [30, 31]}, "name": "Ann"})
    assert not matches(USERS[0], {"age": {"gte": 18, "in": [31]}})


def test_find_first_reports_position():
    assert find_first(USERS, {"is_active": False}) == (1, USERS[1])
    assert find_first(USERS, {"id": 99}) is None


def test_sort_single_key_both_directions():
    assert [u["id"] for u in sort_records(USERS, [("age", "asc")])] == [2, 1, 3]
    assert [u["id"] for u in sort_records(USERS, {"age": "desc"})] == [3, 1, 2]


def test_sort_multi_key_and_stability():
    records = [
        {"id": 1, "team": "b", "score": 5},
        {"id": 2, "team": "a", "score": 5},
        {"id": 3, "team": "a", "score": 9},
        {"id": 4, "team": "b", "score": 5},
    ]
    ordered = sort_records(records, [("team", "asc"), ("score", "desc")])
    assert [r["id"] for r in ordered] == [3, 2, 1, 4]
    # equal keys keep input order
    assert [r["id"] for r in sort_records(records, [("score", "asc")])] == [1, 2, 4, 3]


def test_sort_nulls_first_ascending_last_descending():
    records = [{"id": 1, "age": 20}, {"id": 2, "age": None}, {"id": 3}]
    assert [r["id"] for r in sort_records(records, [("age", "asc")])] == [2, 3, 1]
    assert [r["id"] for r in sort_records(records, [("age", "desc")])] == [1, 2, 3]


def test_sort_is_idempotent_and_pure():
    once = sort_records(USERS, [("name", "desc")])
    assert sort_records(once, [("name", "desc")]) == once
    assert [u["id"] for u in USERS] == [1, 2, 3]
    assert sort_records(USERS) == USERS


def test_sort_temporal_values():
    records = [
        {"id": 1, "at": datetime(2024, 1, 2)},
        {"id": 2, "at": date(2024, 1, 1)},
        {"id": 3, "at": datetime(2023, 12, 31, 23, 0)},
    ]
    assert [r["id"] for r in sort_records(records, [("at", "asc")])] == [3, 2, 1]


def test_bad_direction_raises():
    with pytest.raises(QueryError, match="direction"):
        sort_records(USERS, [("age", "up")])
    with pytest.raises(QueryError):
        normalize_order_by(["age"])


def test_normalize_order_by_accepts_upper_case():
    assert normalize_order_by({"age": "DESC"}) == [("age", "desc")]


def test_compare_values_basics():
    assert compare_values(None, None) == 0
    assert compare_values(None, 1) == -1
    assert compare_values(1, None) == 1
    assert compare_values(2, 10) == -1
    assert compare_values(2.5, 2.5) == 0


def test_paginate_bounds():
    items = list(range(5))
    assert paginate(items) == items
    assert paginate(items, take=2) == [0, 1]
    assert paginate(items, skip=3) == [3, 4]
    assert paginate(items, take=2, skip=1) == [1, 2]
    assert paginate(items, take=10, skip=4) == [4]
    assert paginate(items, skip=10) == []
    assert paginate(items, take=0) == []
    assert paginate(items, take=-1) == []
    assert paginate(items, take=2, skip=-3) == [0, 1]


def test_filter_sort_paginate_pipeline():
    active_first = sort_records(filter_records(USERS, {"age": {"gte": 18}}), [("age", "desc")])
    assert paginate(active_first, take=1) == [USERS[2]]
