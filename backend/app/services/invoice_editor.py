"""
Invoice Editor - form state for creating or editing one invoice.

Holds the invoice header and an ordered list of line drafts, keeps every
line total equal to quantity * unit price, caps quantities at the stock
available for the selected inventory item, and validates the whole form
before handing it to a persistence callable.
"""
import logging
import time
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from app.config import settings
from app.schemas.editor import InvoiceHeader, LineItemDraft, Notification
from app.schemas.invoice import InvoiceItemCreate, InvoiceStatus, InvoiceSubmission
from app.services.exceptions import (
    EditorLineNotFoundError,
    EditorStateError,
    InvoiceValidationError,
)

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class InventorySnapshot:
    """Inventory item as the editor saw it when the form was opened"""
    id: int
    name: str
    unit_price: Decimal
    quantity: int
    description: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_item(cls, item: Any) -> "InventorySnapshot":
        return cls(
            id=item.id,
            name=item.name,
            unit_price=Decimal(str(item.unit_price)),
            quantity=int(item.quantity),
            description=item.description,
            category=item.category,
        )


# Notifications

CLIENT_REQUIRED = Notification(title="Error", description="Please select a client", variant="destructive")
LINES_INVALID = Notification(
    title="Error",
    description="Please select inventory items for all line items",
    variant="destructive",
)
NUMBER_REQUIRED = Notification(title="Error", description="Please enter an invoice number", variant="destructive")
SAVE_FAILED = Notification(title="Error", description="Failed to save invoice", variant="destructive")


def insufficient_stock_notice(name: str, available: int) -> Notification:
    return Notification(
        title="Insufficient Inventory",
        description=f"Only {available} units available for {name}",
        variant="destructive",
    )


def generate_invoice_number() -> str:
    """Prefix plus the last four digits of the millisecond clock, e.g. INV-4821"""
    millis = str(int(time.time() * 1000))
    return f"{settings.invoice_number_prefix}{millis[-4:]}"


def calculate_line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return Decimal(quantity) * Decimal(str(unit_price))


def validate_line_items(
    lines: Iterable[Any],
    inventory: Dict[int, InventorySnapshot],
) -> Optional[Notification]:
    """
    Check every line of a new invoice.

    A line needs an inventory item, a description, a positive quantity and a
    positive unit price. Lines sharing an inventory item together must not ask
    for more units than are in stock. Returns the notification for the first
    offending line, or None.
    """
    requested: Dict[int, int] = {}
    for line in lines:
        if not line.inventory_id or not line.description or line.quantity <= 0 or line.unit_price <= 0:
            return LINES_INVALID

        stock = inventory.get(line.inventory_id)
        if stock is None:
            return LINES_INVALID
        requested[stock.id] = requested.get(stock.id, 0) + line.quantity
        if requested[stock.id] > stock.quantity:
            return insufficient_stock_notice(stock.name, stock.quantity)
    return None


def filter_clients(clients: Iterable[Any], query: str) -> List[Any]:
    """Clients whose company or contact name contains the query"""
    needle = query.lower()
    return [
        client for client in clients
        if needle in client.company_name.lower() or needle in client.contact_name.lower()
    ]


def filter_inventory(items: Iterable[Any], query: str) -> List[Any]:
    """In-stock items whose name, description or category contains the query"""
    needle = query.lower()
    return [
        item for item in items
        if item.quantity > 0 and (
            needle in item.name.lower()
            or (item.description and needle in item.description.lower())
            or (item.category and needle in item.category.lower())
        )
    ]


class InvoiceEditor:
    """One invoice form: closed -> open -> submitting -> closed"""

    def __init__(self, inventory: Iterable[InventorySnapshot] = ()):
        self.inventory: Dict[int, InventorySnapshot] = {item.id: item for item in inventory}
        self.state = EditorState.CLOSED
        self.invoice_id: Optional[int] = None
        self.header: Optional[InvoiceHeader] = None
        self.lines: List[LineItemDraft] = []
        self.notifications: List[Notification] = []
        self.saved_invoice_id: Optional[int] = None
        self._line_counter = 0

    # State

    @property
    def is_new(self) -> bool:
        return self.invoice_id is None

    def _require_open(self) -> None:
        if self.state != EditorState.OPEN:
            raise EditorStateError(f"Editor is {self.state.value}, expected open")

    def notify(self, notification: Notification) -> Notification:
        self.notifications.append(notification)
        return notification

    def drain_notifications(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    def _new_line(self, **fields) -> LineItemDraft:
        self._line_counter += 1
        return LineItemDraft(id=str(self._line_counter), **fields)

    def open(self, invoice: Optional[Any] = None, today: Optional[date] = None) -> None:
        """
        Open the form blank, or prefilled from an existing invoice.

        Existing line items are not loaded back; a single placeholder line
        carries the invoice's previous subtotal.
        """
        if self.state != EditorState.CLOSED:
            raise EditorStateError(f"Editor is already {self.state.value}")

        today = today or date.today()
        self._line_counter = 0
        self.notifications = []
        self.saved_invoice_id = None

        if invoice is not None:
            subtotal = Decimal(str(invoice.subtotal or 0))
            self.invoice_id = invoice.id
            self.header = InvoiceHeader(
                client_id=invoice.client_id,
                invoice_number=invoice.invoice_number,
                issue_date=invoice.issue_date,
                due_date=invoice.due_date,
                notes=invoice.notes or "",
                status=InvoiceStatus(invoice.status),
            )
            self.lines = [self._new_line(
                description=settings.placeholder_line_description,
                quantity=1,
                unit_price=subtotal,
                line_total=subtotal,
            )]
            logger.info(f"Opened editor for invoice {invoice.id}")
        else:
            self.invoice_id = None
            self.header = InvoiceHeader(
                invoice_number=generate_invoice_number(),
                issue_date=today,
                due_date=today + timedelta(days=settings.invoice_due_days),
            )
            self.lines = [self._new_line()]
            logger.info("Opened blank invoice editor")

        self.state = EditorState.OPEN

    def close(self) -> None:
        self.state = EditorState.CLOSED

    # Header

    def update_header(self, **fields) -> InvoiceHeader:
        self._require_open()
        values = {key: value for key, value in fields.items() if value is not None}
        self.header = self.header.model_copy(update=values)
        return self.header

    # Lines

    def get_line(self, line_id: str) -> LineItemDraft:
        for line in self.lines:
            if line.id == line_id:
                return line
        raise EditorLineNotFoundError(f"Line {line_id} not found")

    def add_line(self) -> LineItemDraft:
        self._require_open()
        line = self._new_line()
        self.lines.append(line)
        return line

    def remove_line(self, line_id: str) -> bool:
        """Remove a line; the last remaining line is never removed"""
        self._require_open()
        line = self.get_line(line_id)
        if len(self.lines) <= 1:
            return False
        self.lines.remove(line)
        return True

    def select_inventory(self, line_id: str, inventory_id: int) -> LineItemDraft:
        """Bind a line to an inventory item, copying its name and price"""
        self._require_open()
        line = self.get_line(line_id)
        stock = self.inventory.get(inventory_id)
        if stock is None:
            raise EditorLineNotFoundError(f"Inventory item {inventory_id} not found")

        quantity = min(line.quantity, stock.quantity)
        line.inventory_id = stock.id
        line.description = stock.name
        line.unit_price = stock.unit_price
        line.quantity = quantity
        line.line_total = calculate_line_total(quantity, stock.unit_price)
        return line

    def set_quantity(self, line_id: str, quantity: int) -> Optional[Notification]:
        """
        Change a line's quantity.

        For a line bound to an inventory item, a request above the available
        stock is capped at the stock level and a warning is returned.
        """
        self._require_open()
        line = self.get_line(line_id)
        notice = None

        stock = self.inventory.get(line.inventory_id) if line.inventory_id else None
        if stock is not None and quantity > stock.quantity:
            notice = self.notify(insufficient_stock_notice(stock.name, stock.quantity))
            line.quantity = stock.quantity
        else:
            line.quantity = quantity

        line.line_total = calculate_line_total(line.quantity, line.unit_price)
        return notice

    def set_unit_price(self, line_id: str, unit_price: Decimal) -> LineItemDraft:
        self._require_open()
        line = self.get_line(line_id)
        line.unit_price = Decimal(str(unit_price))
        line.line_total = calculate_line_total(line.quantity, line.unit_price)
        return line

    # Totals

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @property
    def tax_amount(self) -> Decimal:
        return Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax_amount

    # Submit

    def validate(self) -> Optional[Notification]:
        self._require_open()
        if not self.header.client_id:
            return CLIENT_REQUIRED
        if not self.header.invoice_number.strip():
            return NUMBER_REQUIRED
        if self.is_new:
            return validate_line_items(self.lines, self.inventory)
        return None

    def build_submission(self) -> InvoiceSubmission:
        return InvoiceSubmission(
            client_id=self.header.client_id,
            invoice_number=self.header.invoice_number,
            issue_date=self.header.issue_date,
            due_date=self.header.due_date,
            notes=self.header.notes,
            status=self.header.status,
            items=[
                InvoiceItemCreate(
                    inventory_id=line.inventory_id,
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in self.lines
            ],
        )

    def submit(self, persist: Callable[[InvoiceSubmission], int]) -> Optional[int]:
        """
        Validate and hand the form to persist, which returns the saved invoice id.

        Closes the editor on success. On any validation or save failure the
        editor goes back to open with a notification and None is returned.
        """
        notice = self.validate()
        if notice is not None:
            self.notify(notice)
            return None

        self.state = EditorState.SUBMITTING
        try:
            invoice_id = persist(self.build_submission())
        except InvoiceValidationError as e:
            self.state = EditorState.OPEN
            self.notify(e.notification)
            return None
        except Exception:
            logger.error("Saving invoice from editor failed", exc_info=True)
            self.state = EditorState.OPEN
            self.notify(SAVE_FAILED)
            return None

        created = self.is_new
        self.saved_invoice_id = invoice_id
        self.notify(Notification(
            title="Success",
            description="Invoice created successfully" if created else "Invoice updated successfully",
        ))
        self.close()
        return invoice_id
