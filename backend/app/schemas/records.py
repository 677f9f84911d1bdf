from enum import Enum
from pydantic import BaseModel
from typing import List, Optional


class ColumnKind(str, Enum):
    IDENTITY = "identity"
    TEXT = "text"
    CURRENCY = "currency"
    DATETIME = "datetime"
    STATUS = "status"


class ColumnDescriptor(BaseModel):
    key: str
    label: str
    kind: ColumnKind


class TableSchema(BaseModel):
    name: str
    title: str
    columns: List[ColumnDescriptor]


class RenderedCell(BaseModel):
    column: str
    kind: ColumnKind
    text: str
    badge_color: Optional[str] = None  # status columns only
    monospace: bool = False
    muted: bool = False


class RowAction(BaseModel):
    name: str  # "edit" or "delete"
    enabled: bool = False


class RenderedRow(BaseModel):
    record_id: Optional[str] = None
    cells: List[RenderedCell]
    actions: List[RowAction] = []


class RecordTableResponse(BaseModel):
    name: str
    title: str
    columns: List[ColumnDescriptor]
    rows: List[RenderedRow] = []
    total_count: int
    match_count: int
    search: str = ""


class RecordTableSummary(BaseModel):
    name: str
    title: str
    count: int
