from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class InvoiceItemCreate(BaseModel):
    """One line of an invoice submission; line_total is always recomputed server-side"""
    inventory_id: Optional[int] = None
    description: str = ""
    quantity: int = 1
    unit_price: Decimal = Decimal("0")


class InvoiceItemResponse(BaseModel):
    id: int
    invoice_id: int
    inventory_id: Optional[int]
    description: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True


class InvoiceSubmission(BaseModel):
    """Header fields plus line items, as produced by the invoice editor"""
    client_id: Optional[int] = None
    invoice_number: str = Field(..., min_length=1)
    issue_date: date
    due_date: date
    notes: str = ""
    status: InvoiceStatus = InvoiceStatus.DRAFT
    items: List[InvoiceItemCreate] = []


class InvoiceResponse(BaseModel):
    id: int
    user_id: Optional[int]
    client_id: int
    invoice_number: str
    issue_date: date
    due_date: date
    notes: Optional[str]
    status: str
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class InvoiceListResponse(BaseModel):
    id: int
    invoice_number: str
    client_id: int
    client_name: Optional[str] = None
    total_amount: Decimal
    status: str
    issue_date: date
    due_date: date
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class InvoiceDetailResponse(InvoiceResponse):
    client_name: Optional[str] = None
    invoice_items: List[InvoiceItemResponse] = []
