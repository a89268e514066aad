from __future__ import annotations

from .client import SpreadsheetClient

"""SUMMARY line rendering for the CLI.

Format:
SUMMARY tables={count} rows={total} [{table}={rows} ...]
"""


def render_summary_line(client: SpreadsheetClient) -> str:
    """Render a SUMMARY line from the loaded tables of ``client``.

    Per-table counts follow the schema's declaration order.

    Examples:
        >>> from sheet_orm.store.memory import InMemoryStore
        >>> from sheet_orm.models.schema import number_column
        >>> store = InMemoryStore({"Users": [["ID"], [1], [2]]})
        >>> client = SpreadsheetClient(store, {"Users": {"id": number_column("ID", primary_key=True)}})
        >>> render_summary_line(client)
        'SUMMARY tables=1 rows=2 Users=2'
    """
    counts = {name: len(model) for name, model in client.models.items()}
    parts = [f"tables={len(counts)}", f"rows={sum(counts.values())}"]
    parts.extend(f"{name}={rows}" for name, rows in counts.items())
    return "SUMMARY " + " ".join(parts)
