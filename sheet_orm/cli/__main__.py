from __future__ import annotations

import argparse
import dataclasses
import json
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from sheet_orm.config.loader import ConfigError, build_schema, load_config
from sheet_orm.errors import QueryError, SheetOrmError
from sheet_orm.logging.init import log_summary, setup_logging
from sheet_orm.models.query_args import parse_find_many_args
from sheet_orm.models.schema import ColumnDefinition, ColumnKind
from sheet_orm.services.client import SpreadsheetClient, create_client
from sheet_orm.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (override mode), then the YAML config
- Open the workbook and load every declared table
- Either inspect tables, query one table, or log a SUMMARY line

Environment:
- SHEET_ORM_CONFIG   config path (default config/sheet_orm.yml)
- SHEET_ORM_WORKBOOK overrides the config's workbook path
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_NOT_FOUND = 2

DEFAULT_CONFIG_PATH = Path("config/sheet_orm.yml")
INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; .env values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheet-orm", description="Query spreadsheet tables as records")
    p.add_argument("--config", type=Path, default=None, help="Config YAML path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print table headers & first rows then exit")
    p.add_argument("--table", help="Table to query")
    target = p.add_mutually_exclusive_group()
    target.add_argument("--id", help="Primary key value to fetch (JSON literal or plain text)")
    target.add_argument("--count", action="store_true", help="Print the number of matching records")
    p.add_argument("--query", default="{}", help='find-many query as JSON, e.g. {"where": {"age": {"gte": 18}}}')
    return p.parse_args(argv)


def _json_default(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _dumps(record: Mapping[str, Any]) -> str:
    return json.dumps(record, default=_json_default, ensure_ascii=False)


def _parse_literal(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _coerce_operand(definition: ColumnDefinition, operand: Any) -> Any:
    if isinstance(operand, list):
        return [_coerce_operand(definition, o) for o in operand]
    if isinstance(operand, str) and definition.parser is not None:
        try:
            return definition.parser(operand)
        except ValueError as e:
            raise QueryError(f"column '{definition.column}': cannot parse {operand!r}: {e}") from e
    return operand


def _coerce_where(where: Mapping[str, Any] | None, schema: Mapping[str, ColumnDefinition]) -> dict[str, Any] | None:
    """Parse ISO strings in a JSON where-condition for date columns."""
    if not where:
        return None
    coerced: dict[str, Any] = {}
    for field, condition in where.items():
        definition = schema.get(field)
        if definition is None or definition.kind is not ColumnKind.DATE:
            coerced[field] = condition
        elif isinstance(condition, Mapping):
            coerced[field] = {op: _coerce_operand(definition, v) for op, v in condition.items()}
        else:
            coerced[field] = _coerce_operand(definition, condition)
    return coerced


def _inspect_data(client: SpreadsheetClient) -> int:
    for name, model in client.models.items():
        print(f"TABLE: {name} cols={model.header} rows={len(model)}")
        sample = model.find_many(take=INSPECT_SAMPLE_ROWS)
        print("    sample_rows=", [json.loads(_dumps(r)) for r in sample])
    return EXIT_SUCCESS


def _query_table(client: SpreadsheetClient, args: argparse.Namespace, logger) -> int:
    model = client.get(args.table)
    if model is None:
        logger.error(f"table not declared: {args.table}")
        return EXIT_FATAL

    if args.id is not None:
        record = model.get(_parse_literal(args.id))
        if record is None:
            logger.error(f"not found: {args.table} {model.primary_key}={args.id}")
            return EXIT_NOT_FOUND
        print(_dumps(record))
        return EXIT_SUCCESS

    try:
        query = parse_find_many_args(json.loads(args.query))
    except json.JSONDecodeError as e:
        logger.error(f"query: invalid JSON: {e}")
        return EXIT_FATAL
    query = dataclasses.replace(query, where=_coerce_where(query.where, model.schema))

    if args.count:
        print(model.count(query))
        return EXIT_SUCCESS

    for record in model.find_many(query):
        print(_dumps(record))
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストから [] を渡すケース)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    config_path = args.config or Path(os.getenv("SHEET_ORM_CONFIG", str(DEFAULT_CONFIG_PATH)))
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    level = "DEBUG" if args.debug else cfg.log_level
    for h in logger.handlers:
        h.setLevel(level)
    logger.setLevel(level)
    logger.debug("debug mode enabled")

    workbook = Path(os.getenv("SHEET_ORM_WORKBOOK") or cfg.workbook)
    if not workbook.exists():
        logger.error(f"workbook not found: {workbook}")
        return EXIT_FATAL

    logger.info(f"Opening workbook: {workbook}")
    try:
        client = create_client(workbook, build_schema(cfg), strict=cfg.strict)
        if args.inspect_data:
            return _inspect_data(client)
        if args.table:
            return _query_table(client, args, logger)
    except SheetOrmError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return EXIT_FATAL

    summary_line = render_summary_line(client)
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
