from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..errors import SheetOrmError
from ..models.config_models import ClientConfig, ColumnConfig, TableConfig
from ..models.schema import ColumnDefinition, ColumnKind, column, date_column

"""Config loader.

Responsibilities:
- Load the YAML client config (default config/sheet_orm.yml)
- Validate it against config_schema.json (shipped next to this module)
- Apply defaults (strict=true, log_level=INFO, kind=string)
- Build table schemas (ColumnDefinitions) from the declarative column entries
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "DEFAULT_FACTORIES",
    "load_config",
    "build_schema",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

DEFAULT_FACTORIES: dict[str, Callable[[], Any]] = {
    "now": lambda: datetime.now(UTC),
    "today": date.today,
    "uuid4": lambda: str(uuid.uuid4()),
}


class ConfigError(SheetOrmError):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: the schema file is missing or not valid JSON, or the config
            data fails validation (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> ClientConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    tables: dict[str, TableConfig] = {}
    for table_name, table_raw in data["tables"].items():
        columns = [
            ColumnConfig(
                field=field_name,
                column=raw["column"],
                kind=raw.get("kind", "string"),
                primary_key=raw.get("primary_key", False),
                nullable=raw.get("nullable", not raw.get("primary_key", False)),
                default=raw.get("default"),
                default_factory=raw.get("default_factory"),
                codec=raw.get("codec"),
            )
            for field_name, raw in table_raw["columns"].items()
        ]
        tables[str(table_name)] = TableConfig(name=str(table_name), columns=columns)

    return ClientConfig(
        workbook=data["workbook"],
        tables=tables,
        strict=data.get("strict", True),
        log_level=data.get("log_level", "INFO"),
    )


def _json_parser(value: Any) -> Any:
    return json.loads(value) if isinstance(value, str) else value


def _json_serializer(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _build_column(cfg: ColumnConfig) -> ColumnDefinition:
    options: dict[str, Any] = {
        "primary_key": cfg.primary_key,
        "nullable": cfg.nullable,
    }
    if cfg.default_factory is not None:
        options["default"] = DEFAULT_FACTORIES[cfg.default_factory]
    elif cfg.default is not None:
        options["default"] = cfg.default
    if cfg.codec == "json":
        options["parser"] = _json_parser
        options["serializer"] = _json_serializer

    kind = ColumnKind(cfg.kind)
    if kind is ColumnKind.DATE:
        return date_column(cfg.column, **options)
    return column(cfg.column, kind, **options)


def build_schema(config: ClientConfig) -> dict[str, dict[str, ColumnDefinition]]:
    """Schema of schemas (table -> field -> ColumnDefinition) described by ``config``."""
    return {
        name: {c.field: _build_column(c) for c in table.columns}
        for name, table in config.tables.items()
    }
