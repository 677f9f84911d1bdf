from app.models.profile import Profile
from app.models.client import Client
from app.models.inventory_item import InventoryItem
from app.models.invoice import Invoice
from app.models.invoice_item import InvoiceItem

__all__ = ["Profile", "Client", "InventoryItem", "Invoice", "InvoiceItem"]
