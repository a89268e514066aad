from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..errors import QueryError

"""Query argument shapes for the table model.

TableModel methods take these as keyword arguments; the dataclasses exist so that
a query can be built once (e.g. from CLI JSON) and passed around as a value.
"""

__all__ = [
    "Record",
    "WhereCondition",
    "OrderBy",
    "FindManyArgs",
    "FindUniqueArgs",
    "CreateArgs",
    "UpdateArgs",
    "DeleteArgs",
    "DeleteManyArgs",
    "FIND_MANY_JSON_SCHEMA",
    "parse_find_many_args",
]

Record = dict[str, Any]
WhereCondition = Mapping[str, Any]
# ordered (field, "asc"|"desc") pairs; a mapping is read in insertion order
OrderBy = Sequence[tuple[str, str]] | Mapping[str, str]


@dataclass(frozen=True)
class FindManyArgs:
    where: WhereCondition | None = None
    order_by: OrderBy | None = None
    take: int | None = None
    skip: int | None = None


@dataclass(frozen=True)
class FindUniqueArgs:
    where: WhereCondition


@dataclass(frozen=True)
class CreateArgs:
    data: Mapping[str, Any]


@dataclass(frozen=True)
class UpdateArgs:
    where: WhereCondition
    data: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteArgs:
    where: WhereCondition


@dataclass(frozen=True)
class DeleteManyArgs:
    where: WhereCondition | None = None


_DIRECTION = {"enum": ["asc", "desc"]}

FIND_MANY_JSON_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "where": {"type": "object"},
        "orderBy": {
            "oneOf": [
                {"type": "object", "additionalProperties": _DIRECTION},
                {
                    "type": "array",
                    "items": {
                        "type": "array",
                        "prefixItems": [{"type": "string"}, _DIRECTION],
                        "minItems": 2,
                        "maxItems": 2,
                    },
                },
            ]
        },
        "take": {"type": "integer"},
        "skip": {"type": "integer", "minimum": 0},
    },
}


def parse_find_many_args(data: Mapping[str, Any]) -> FindManyArgs:
    """Validate a JSON-shaped find-many query and convert it to FindManyArgs.

    Raises:
        QueryError: the mapping does not match FIND_MANY_JSON_SCHEMA.
    """
    instance = dict(data) if isinstance(data, Mapping) else data
    try:
        jsonschema.validate(instance, FIND_MANY_JSON_SCHEMA)
    except ValidationError as e:
        raise QueryError(f"invalid query: {e.message}") from e
    data = instance

    order_by = data.get("orderBy")
    if isinstance(order_by, list):
        order_by = [(str(field), str(direction)) for field, direction in order_by]
    return FindManyArgs(
        where=data.get("where"),
        order_by=order_by,
        take=data.get("take"),
        skip=data.get("skip"),
    )
