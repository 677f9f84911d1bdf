from app.schemas.client import ClientCreate, ClientResponse
from app.schemas.profile import ProfileResponse
from app.schemas.inventory import InventoryItemResponse
from app.schemas.invoice import (
    InvoiceStatus,
    InvoiceItemCreate,
    InvoiceItemResponse,
    InvoiceSubmission,
    InvoiceResponse,
    InvoiceListResponse,
    InvoiceDetailResponse,
)
from app.schemas.editor import Notification, LineItemDraft, InvoiceHeader, EditorSessionResponse
from app.schemas.records import ColumnKind, ColumnDescriptor, RenderedCell, RecordTableResponse

__all__ = [
    "ClientCreate",
    "ClientResponse",
    "ProfileResponse",
    "InventoryItemResponse",
    "InvoiceStatus",
    "InvoiceItemCreate",
    "InvoiceItemResponse",
    "InvoiceSubmission",
    "InvoiceResponse",
    "InvoiceListResponse",
    "InvoiceDetailResponse",
    "Notification",
    "LineItemDraft",
    "InvoiceHeader",
    "EditorSessionResponse",
    "ColumnKind",
    "ColumnDescriptor",
    "RenderedCell",
    "RecordTableResponse",
]
