"""
Invoice Service - persists invoices produced by the editor or the REST API.

Creating an invoice writes the invoice, then its line items, then one stock
decrement per inventory-backed line. All three steps share one database
transaction: if any of them fails nothing is kept.
"""
import logging
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth import UserContext
from app.models.inventory_item import InventoryItem
from app.models.invoice import Invoice
from app.schemas.invoice import InvoiceItemCreate, InvoiceSubmission
from app.services.exceptions import InvoiceSubmissionError, InvoiceValidationError, StockConflictError
from app.services.invoice_editor import (
    CLIENT_REQUIRED,
    LINES_INVALID,
    InventorySnapshot,
    calculate_line_total,
    insufficient_stock_notice,
    validate_line_items,
)
from app.services.record_store import InsufficientStockError, RecordNotFoundError, RecordStore, RecordStoreError

logger = logging.getLogger(__name__)


def calculate_subtotal(items: List[InvoiceItemCreate]) -> Decimal:
    return sum((calculate_line_total(item.quantity, item.unit_price) for item in items), Decimal("0"))


def load_inventory(db: Session, inventory_ids: List[int]) -> Dict[int, InventorySnapshot]:
    """Current stock for the given inventory items"""
    if not inventory_ids:
        return {}
    items = db.query(InventoryItem).filter(InventoryItem.id.in_(inventory_ids)).all()
    return {item.id: InventorySnapshot.from_item(item) for item in items}


def _header_values(submission: InvoiceSubmission) -> dict:
    """Header columns, plus totals when the submission carries lines"""
    values = {
        "client_id": submission.client_id,
        "invoice_number": submission.invoice_number,
        "issue_date": submission.issue_date,
        "due_date": submission.due_date,
        "notes": submission.notes,
        "status": submission.status.value,
    }
    if submission.items:
        subtotal = calculate_subtotal(submission.items)
        values.update(subtotal=subtotal, tax_amount=Decimal("0"), total_amount=subtotal)
    return values


def _check_client(store: RecordStore, context: UserContext, submission: InvoiceSubmission) -> None:
    """The client must exist and belong to the submitting user"""
    if not submission.client_id:
        raise InvoiceValidationError(CLIENT_REQUIRED)
    try:
        client = store.get_record("clients", submission.client_id)
    except RecordNotFoundError:
        raise InvoiceValidationError(CLIENT_REQUIRED)
    if client.user_id is not None and client.user_id != context.user_id:
        raise InvoiceValidationError(CLIENT_REQUIRED)


def create_invoice(db: Session, context: UserContext, submission: InvoiceSubmission) -> Invoice:
    """
    Create an invoice with its line items and take the sold units out of stock.

    Raises InvoiceValidationError before writing anything when the form is
    invalid, StockConflictError when stock ran out during the write, and
    InvoiceSubmissionError for any other database failure.
    """
    store = RecordStore(db)
    _check_client(store, context, submission)

    inventory = load_inventory(db, [item.inventory_id for item in submission.items if item.inventory_id])
    notice = validate_line_items(submission.items, inventory) if submission.items else LINES_INVALID
    if notice is not None:
        logger.info(f"Rejected invoice {submission.invoice_number}: {notice.description}")
        raise InvoiceValidationError(notice)

    try:
        with store.transaction():
            values = _header_values(submission)
            values["user_id"] = context.user_id
            invoice = store.create_record("invoices", values)

            store.create_records("invoice_items", [
                {
                    "invoice_id": invoice.id,
                    "inventory_id": item.inventory_id,
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "line_total": calculate_line_total(item.quantity, item.unit_price),
                }
                for item in submission.items
            ])

            for item in submission.items:
                if item.inventory_id and item.quantity > 0:
                    store.decrement_field("inventory_items", item.inventory_id, "quantity", item.quantity)
    except InsufficientStockError as e:
        current = db.get(InventoryItem, e.record_id)
        logger.warning(f"Stock conflict while saving invoice {submission.invoice_number}: {e}")
        raise StockConflictError(insufficient_stock_notice(
            current.name if current else f"item {e.record_id}",
            current.quantity if current else 0,
        ))
    except (SQLAlchemyError, RecordStoreError) as e:
        logger.error(f"Failed to save invoice {submission.invoice_number}: {str(e)}", exc_info=True)
        raise InvoiceSubmissionError("Failed to save invoice") from e

    db.refresh(invoice)
    logger.info(
        f"Created invoice {invoice.invoice_number} (ID: {invoice.id}) with "
        f"{len(submission.items)} items, total {invoice.total_amount}"
    )
    return invoice


def update_invoice(db: Session, context: UserContext, invoice_id: int, submission: InvoiceSubmission) -> Invoice:
    """
    Update the header and totals of an existing invoice.

    Line items and stock are left as they are. Totals are recomputed from the
    submitted lines when there are any, otherwise the stored totals stay.
    """
    store = RecordStore(db)
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.user_id == context.user_id).first()
    if invoice is None:
        raise RecordNotFoundError(f"invoices record {invoice_id} not found")
    _check_client(store, context, submission)

    try:
        with store.transaction():
            store.update_record("invoices", invoice_id, _header_values(submission))
    except SQLAlchemyError as e:
        logger.error(f"Failed to update invoice {invoice_id}: {str(e)}", exc_info=True)
        raise InvoiceSubmissionError("Failed to save invoice") from e

    db.refresh(invoice)
    logger.info(f"Updated invoice {invoice.invoice_number} (ID: {invoice.id})")
    return invoice
