from __future__ import annotations

import locale
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date, datetime, time
from functools import cmp_to_key
from typing import Any

from ..errors import QueryError
from ..models.query_args import OrderBy, WhereCondition

"""In-memory query engine: filter, sort and paginate record collections.

All three operations are pure: they never mutate their input and always return
a new list, so callers compose them freely (filter -> sort -> paginate).

Where-condition semantics:
- a literal value means strict equality (booleans never equal numbers)
- None means "value is None or absent"
- a mapping whose keys are all operator names is a predicate; its operators are
  AND-ed. Any other mapping is compared as a literal.
- ordering operators need numeric or temporal operands, text operators need
  strings; anything else is a non-match.
"""

__all__ = [
    "OPERATORS",
    "matches",
    "match_field",
    "filter_records",
    "find_first",
    "compare_values",
    "normalize_order_by",
    "sort_records",
    "paginate",
]

ASC = "asc"
DESC = "desc"


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_temporal(value: Any) -> bool:
    return isinstance(value, (datetime, date))


def _temporal_key(value: date) -> datetime:
    # a bare date compares as midnight of that day
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def _ordered(value: Any, operand: Any, compare: Callable[[Any, Any], bool]) -> bool:
    if _is_number(value) and _is_number(operand):
        return compare(value, operand)
    if _is_temporal(value) and _is_temporal(operand):
        try:
            return compare(_temporal_key(value), _temporal_key(operand))
        except TypeError:  # naive vs aware
            return False
    return False


def _text(value: Any, operand: Any, test: Callable[[str, str], bool]) -> bool:
    return isinstance(value, str) and isinstance(operand, str) and test(value, operand)


def _member(value: Any, candidates: Any) -> bool:
    if isinstance(candidates, (str, bytes)) or not isinstance(candidates, Iterable):
        return False
    return any(_strict_equals(value, c) for c in candidates)


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "equals": _strict_equals,
    "not": lambda v, o: not _strict_equals(v, o),
    "in": _member,
    "notIn": lambda v, o: not _member(v, o),
    "lt": lambda v, o: _ordered(v, o, lambda a, b: a < b),
    "lte": lambda v, o: _ordered(v, o, lambda a, b: a <= b),
    "gt": lambda v, o: _ordered(v, o, lambda a, b: a > b),
    "gte": lambda v, o: _ordered(v, o, lambda a, b: a >= b),
    "contains": lambda v, o: _text(v, o, lambda a, b: b in a),
    "startsWith": lambda v, o: _text(v, o, str.startswith),
    "endsWith": lambda v, o: _text(v, o, str.endswith),
}


def _is_predicate(condition: Any) -> bool:
    return isinstance(condition, Mapping) and all(key in OPERATORS for key in condition)


def match_field(value: Any, condition: Any) -> bool:
    """Evaluate one field's condition against a record value."""
    if condition is None:
        return value is None
    if _is_predicate(condition):
        return all(OPERATORS[op](value, operand) for op, operand in condition.items())
    return _strict_equals(value, condition)


def matches(record: Mapping[str, Any], where: WhereCondition | None) -> bool:
    """Conjunction of match_field over every field named in ``where``."""
    if not where:
        return True
    return all(match_field(record.get(field), condition) for field, condition in where.items())


def filter_records(
    records: Iterable[Mapping[str, Any]], where: WhereCondition | None = None
) -> list[Any]:
    """Keep the records matching ``where``.

    Args:
        records: records to scan, left untouched
        where: field -> literal or operator mapping; None or {} keeps everything

    Returns:
        A new list holding the matching records in input order
    """
    return [r for r in records if matches(r, where)]


def find_first(
    records: Sequence[Mapping[str, Any]], where: WhereCondition | None = None
) -> tuple[int, Any] | None:
    """(position, record) of the first match, or None."""
    for index, record in enumerate(records):
        if matches(record, where):
            return index, record
    return None


def _sign(n: float) -> int:
    return (n > 0) - (n < 0)


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison used by sort_records.

    None sorts first, strings use the active locale's collation, numbers and
    temporal values compare naturally, anything else compares as text.
    """
    if left is None:
        return 0 if right is None else -1
    if right is None:
        return 1
    if isinstance(left, str) and isinstance(right, str):
        return _sign(locale.strcoll(left, right))
    if _is_number(left) and _is_number(right):
        return _sign(left - right)
    if _is_temporal(left) and _is_temporal(right):
        try:
            a, b = _temporal_key(left), _temporal_key(right)
            return (a > b) - (a < b)
        except TypeError:
            pass
    return _sign(locale.strcoll(str(left), str(right)))


def normalize_order_by(order_by: OrderBy | None) -> list[tuple[str, str]]:
    """Turn an order-by mapping or pair sequence into validated (field, direction) pairs."""
    if not order_by:
        return []
    pairs = order_by.items() if isinstance(order_by, Mapping) else order_by
    keys: list[tuple[str, str]] = []
    for pair in pairs:
        try:
            field, direction = pair
        except (TypeError, ValueError) as e:
            raise QueryError(f"order_by entries must be (field, direction) pairs, got {pair!r}") from e
        direction = str(direction).lower()
        if direction not in (ASC, DESC):
            raise QueryError(f"order_by '{field}': direction must be 'asc' or 'desc', got {direction!r}")
        keys.append((field, direction))
    return keys


def sort_records(
    records: Iterable[Mapping[str, Any]], order_by: OrderBy | None = None
) -> list[Any]:
    """Stable multi-key sort; the first non-zero key comparison wins."""
    keys = normalize_order_by(order_by)
    items = list(records)
    if not keys:
        return items

    def compare(a: Mapping[str, Any], b: Mapping[str, Any]) -> int:
        for field, direction in keys:
            result = compare_values(a.get(field), b.get(field))
            if result:
                return -result if direction == DESC else result
        return 0

    return sorted(items, key=cmp_to_key(compare))


def paginate(
    records: Iterable[Any], take: int | None = None, skip: int | None = None
) -> list[Any]:
    """Drop ``skip`` records then keep at most ``take``.

    take <= 0 yields nothing; a negative skip counts as 0.
    """
    items = list(records)
    start = max(skip or 0, 0)
    if take is None:
        return items[start:]
    if take <= 0:
        return []
    return items[start:start + take]
