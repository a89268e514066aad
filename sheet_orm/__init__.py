"""sheet_orm: a typed record layer over spreadsheet tables.

    from sheet_orm import create_client, number_column, string_column

    client = create_client("app.xlsx", {
        "Users": {
            "id": number_column("ID", primary_key=True),
            "name": string_column("Name"),
        },
    })
    users = client["Users"].find_many(where={"name": {"startsWith": "A"}})
"""

from .errors import (
    DuplicateKeyError,
    NotFoundError,
    QueryError,
    RecordValidationError,
    SchemaError,
    SheetHeaderError,
    SheetOrmError,
    StorageError,
    TableNotFoundError,
)
from .excel.workbook_store import ExcelWorkbookStore, create_workbook
from .models.schema import (
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
    number_column,
    string_column,
)
from .services.client import SpreadsheetClient, create_client, create_sheet_client
from .services.table_model import TableModel
from .store.memory import InMemoryStore

__version__ = "0.1.0"

__all__ = [
    "ColumnDefinition",
    "ColumnKind",
    "Constant",
    "DuplicateKeyError",
    "ExcelWorkbookStore",
    "Generator",
    "InMemoryStore",
    "NotFoundError",
    "QueryError",
    "RecordValidationError",
    "SchemaError",
    "SheetHeaderError",
    "SheetOrmError",
    "SpreadsheetClient",
    "StorageError",
    "TableModel",
    "TableNotFoundError",
    "boolean_column",
    "column",
    "create_client",
    "create_sheet_client",
    "create_workbook",
    "custom_column",
    "date_column",
    "define_schema",
    "define_table",
    "number_column",
    "string_column",
]
