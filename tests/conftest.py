# Shared pytest fixtures
from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import pytest

from sheet_orm.logging.init import LOGGER_NAME, reset_logging
from sheet_orm.models.schema import (
    boolean_column,
    custom_column,
    date_column,
    number_column,
    string_column,
)
from sheet_orm.store.memory import InMemoryStore

USER_HEADER = ["ID", "Name", "Age", "IsActive"]


@pytest.fixture(autouse=True)
def _clean_package_logger():
    yield
    # CLI tests attach a stdout handler bound to that test's capture stream
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def user_schema() -> dict:
    return {
        "id": number_column("ID", primary_key=True),
        "name": string_column("Name"),
        "age": number_column("Age"),
        "is_active": boolean_column("IsActive", default=True),
    }


@pytest.fixture()
def memory_store() -> InMemoryStore:
    store = InMemoryStore()
    store.add_sheet(
        "Users",
        USER_HEADER,
        [
            [1, "Ann", 30, True],
            [2, "Bob", 17, False],
            [3, "Cid", 45, False],
        ],
    )
    store.add_sheet("Empty", USER_HEADER)
    return store


@pytest.fixture()
def rich_schema() -> dict:
    """Schema touching every column kind, including a JSON custom column."""
    import json

    return {
        "id": number_column("ID", primary_key=True),
        "name": string_column("Name"),
        "is_active": boolean_column("IsActive"),
        "created_at": date_column("CreatedAt"),
        "status": custom_column("Status"),
        "metadata": custom_column(
            "Metadata",
            parser=lambda v: json.loads(v),
            serializer=lambda v: json.dumps(v),
        ),
    }


@pytest.fixture()
def sample_config_yaml() -> str:
    return """workbook: ./data/app.xlsx
strict: true
tables:
  Users:
    columns:
      id: {column: ID, kind: number, primary_key: true}
      name: {column: Name, kind: string, nullable: false}
      age: {column: Age, kind: number}
      is_active: {column: IsActive, kind: boolean, default: true}
      created_at: {column: CreatedAt, kind: date, default_factory: now}
  Posts:
    columns:
      id: {column: ID, kind: number, primary_key: true}
      title: {column: Title}
      meta: {column: Meta, kind: custom, codec: json}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sheet_orm.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
