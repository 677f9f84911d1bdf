from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.auth import UserContext, get_user_context, require_user
from app.database import get_db
from app.models.invoice import Invoice
from app.schemas.invoice import (
    InvoiceDetailResponse,
    InvoiceItemResponse,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatus,
    InvoiceSubmission,
)
from app.services import invoice_service
from app.services.exceptions import InvoiceSubmissionError, InvoiceValidationError, StockConflictError
from app.services.record_store import RecordNotFoundError, RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("", response_model=List[InvoiceListResponse])
def list_invoices(
    status: Optional[InvoiceStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    context: UserContext = Depends(get_user_context),
):
    """List the signed-in user's invoices, newest first"""
    invoices = RecordStore(db).fetch_records("invoices", context)
    if status:
        invoices = [invoice for invoice in invoices if invoice.status == status.value]

    result = []
    for invoice in sorted(invoices, key=lambda i: i.id, reverse=True):
        result.append(InvoiceListResponse(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            client_name=invoice.client.company_name if invoice.client else "Unknown",
            total_amount=invoice.total_amount,
            status=invoice.status,
            issue_date=invoice.issue_date,
            due_date=invoice.due_date,
            created_at=invoice.created_at
        ))

    return result


def _get_owned_invoice(db: Session, invoice_id: int, context: UserContext) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.user_id == context.user_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
def get_invoice(invoice_id: int, db: Session = Depends(get_db), context: UserContext = Depends(get_user_context)):
    """Get invoice detail with its line items"""
    invoice = _get_owned_invoice(db, invoice_id, context)

    detail = InvoiceDetailResponse.model_validate(invoice)
    detail.client_name = invoice.client.company_name if invoice.client else "Unknown"
    detail.invoice_items = [InvoiceItemResponse.model_validate(item) for item in invoice.invoice_items]
    return detail


def _raise_for_submission_error(e: Exception):
    if isinstance(e, StockConflictError):
        raise HTTPException(status_code=409, detail=e.notification.description)
    if isinstance(e, InvoiceValidationError):
        raise HTTPException(status_code=400, detail=e.notification.description)
    if isinstance(e, RecordNotFoundError):
        raise HTTPException(status_code=404, detail="Invoice not found")
    raise HTTPException(status_code=500, detail="Failed to save invoice")


@router.post("", response_model=InvoiceResponse, status_code=201)
def create_invoice(
    submission: InvoiceSubmission,
    db: Session = Depends(get_db),
    context: UserContext = Depends(require_user),
):
    """Create an invoice with its line items and decrement inventory stock"""
    try:
        return invoice_service.create_invoice(db, context, submission)
    except (InvoiceValidationError, InvoiceSubmissionError) as e:
        _raise_for_submission_error(e)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: int,
    submission: InvoiceSubmission,
    db: Session = Depends(get_db),
    context: UserContext = Depends(require_user),
):
    """Update an invoice's header and totals; line items and stock are not touched"""
    try:
        return invoice_service.update_invoice(db, context, invoice_id, submission)
    except (InvoiceValidationError, InvoiceSubmissionError, RecordNotFoundError) as e:
        _raise_for_submission_error(e)
