from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.auth import UserContext, get_user_context
from app.database import get_db
from app.schemas.invoice import InvoiceItemResponse
from app.services.record_store import RecordStore

router = APIRouter(prefix="/api/invoice-items", tags=["invoice-items"])


@router.get("", response_model=List[InvoiceItemResponse])
def list_invoice_items(
    invoice_id: Optional[int] = Query(None, description="Filter by invoice ID"),
    db: Session = Depends(get_db),
    context: UserContext = Depends(get_user_context),
):
    """List line items of the signed-in user's invoices"""
    items = RecordStore(db).fetch_records("invoice_items", context)
    if invoice_id:
        items = [item for item in items if item.invoice_id == invoice_id]
    return items
