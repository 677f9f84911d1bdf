"""
Record Browser - renders the database tables shown on the admin screen.

Each table is described by an explicit schema (ordered, typed columns); a
single renderer turns raw rows into display cells. Search is done in memory
over every field of the row, not just the visible columns.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.auth import UserContext
from app.schemas.records import (
    ColumnDescriptor,
    ColumnKind,
    RecordTableResponse,
    RecordTableSummary,
    RenderedCell,
    RenderedRow,
    RowAction,
    TableSchema,
)
from app.services.record_store import RecordStore, RecordStoreError, row_to_dict
from app.utils.formatting import format_currency, format_datetime, status_badge_color

logger = logging.getLogger(__name__)

MONEY_MARKERS = ("amount", "price", "total")


def column_kind_for(name: str) -> ColumnKind:
    """Infer how a column is displayed from its name"""
    if name == "id":
        return ColumnKind.IDENTITY
    if name == "status":
        return ColumnKind.STATUS
    if any(marker in name for marker in MONEY_MARKERS):
        return ColumnKind.CURRENCY
    if "date" in name or name.endswith("_at"):
        return ColumnKind.DATETIME
    return ColumnKind.TEXT


def _columns(*names: str) -> List[ColumnDescriptor]:
    return [
        ColumnDescriptor(key=name, label=name.replace("_", " ").title(), kind=column_kind_for(name))
        for name in names
    ]


TABLE_SCHEMAS: Dict[str, TableSchema] = {
    "invoices": TableSchema(
        name="invoices",
        title="Invoices",
        columns=_columns("id", "invoice_number", "client_name", "total_amount", "status", "issue_date", "due_date"),
    ),
    "clients": TableSchema(
        name="clients",
        title="Clients",
        columns=_columns("id", "company_name", "contact_name", "email", "phone", "address"),
    ),
    "profiles": TableSchema(
        name="profiles",
        title="User Profiles",
        columns=_columns("id", "first_name", "last_name", "created_at"),
    ),
    "invoice_items": TableSchema(
        name="invoice_items",
        title="Invoice Items",
        columns=_columns("id", "invoice_id", "description", "quantity", "unit_price", "line_total"),
    ),
}


def get_schema(table: str) -> TableSchema:
    schema = TABLE_SCHEMAS.get(table)
    if schema is None:
        raise RecordStoreError(f"Unknown table: {table}")
    return schema


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def matches_search(row: Dict[str, Any], query: str) -> bool:
    """True when the query appears, case-insensitively, in any field of the row"""
    if not query:
        return True
    needle = query.lower()
    return any(needle in _stringify(value).lower() for value in row.values())


def format_cell(value: Any, column: ColumnDescriptor) -> RenderedCell:
    if value is None:
        return RenderedCell(column=column.key, kind=column.kind, text="-")

    if column.kind == ColumnKind.CURRENCY:
        return RenderedCell(column=column.key, kind=column.kind, text=format_currency(value))
    if column.kind == ColumnKind.DATETIME:
        return RenderedCell(column=column.key, kind=column.kind, text=format_datetime(value))
    if column.kind == ColumnKind.STATUS:
        return RenderedCell(
            column=column.key,
            kind=column.kind,
            text=str(value),
            badge_color=status_badge_color(value),
        )
    if column.kind == ColumnKind.IDENTITY:
        return RenderedCell(column=column.key, kind=column.kind, text=str(value), monospace=True, muted=True)
    return RenderedCell(column=column.key, kind=column.kind, text=str(value))


def render_table(table: str, rows: List[Dict[str, Any]], search: str = "") -> RecordTableResponse:
    schema = get_schema(table)
    matched = [row for row in rows if matches_search(row, search)]

    rendered = [
        RenderedRow(
            record_id=_stringify(row.get("id")) or None,
            cells=[format_cell(row.get(column.key), column) for column in schema.columns],
            # Row actions are displayed but not wired to any mutation yet
            actions=[RowAction(name="edit"), RowAction(name="delete")],
        )
        for row in matched
    ]

    return RecordTableResponse(
        name=schema.name,
        title=schema.title,
        columns=schema.columns,
        rows=rendered,
        total_count=len(rows),
        match_count=len(matched),
        search=search,
    )


def load_rows(db: Session, table: str, context: UserContext) -> List[Dict[str, Any]]:
    """Fetch a table's records as flat dicts ready for searching and rendering"""
    get_schema(table)
    records = RecordStore(db).fetch_records(table, context)

    rows = []
    for record in records:
        row = row_to_dict(record)
        if table == "invoices":
            row["client_name"] = record.client.company_name if record.client else "Unknown"
        rows.append(row)
    return rows


def browse_table(db: Session, table: str, context: UserContext, search: str = "") -> RecordTableResponse:
    rows = load_rows(db, table, context)
    result = render_table(table, rows, search)
    logger.info(f"Browsing {table}: {result.match_count}/{result.total_count} rows match {search!r}")
    return result


def summarize_tables(db: Session, context: UserContext) -> List[RecordTableSummary]:
    store = RecordStore(db)
    return [
        RecordTableSummary(name=name, title=schema.title, count=len(store.fetch_records(name, context)))
        for name, schema in TABLE_SCHEMAS.items()
    ]
