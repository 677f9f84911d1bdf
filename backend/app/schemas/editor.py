from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import date
from decimal import Decimal
from app.schemas.invoice import InvoiceStatus


class Notification(BaseModel):
    """A toast shown to the user"""
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


class LineItemDraft(BaseModel):
    """An editable invoice line; line_total is kept equal to quantity * unit_price"""
    id: str
    inventory_id: Optional[int] = None
    description: str = ""
    quantity: int = 1
    unit_price: Decimal = Decimal("0")
    line_total: Decimal = Decimal("0")


class InvoiceHeader(BaseModel):
    client_id: Optional[int] = None
    invoice_number: str = ""
    issue_date: date
    due_date: date
    notes: str = ""
    status: InvoiceStatus = InvoiceStatus.DRAFT


class EditorSessionResponse(BaseModel):
    session_id: str
    state: Literal["closed", "open", "submitting"]
    invoice_id: Optional[int] = None
    header: Optional[InvoiceHeader] = None
    lines: List[LineItemDraft] = []
    subtotal: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    notifications: List[Notification] = []
    saved_invoice_id: Optional[int] = None


# Request bodies

class OpenEditorRequest(BaseModel):
    invoice_id: Optional[int] = None


class HeaderUpdate(BaseModel):
    client_id: Optional[int] = None
    invoice_number: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    status: Optional[InvoiceStatus] = None


class SelectInventoryRequest(BaseModel):
    inventory_id: int


class QuantityUpdate(BaseModel):
    quantity: int


class UnitPriceUpdate(BaseModel):
    unit_price: Decimal = Field(...)
