from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.auth import UserContext, get_user_context
from app.database import get_db
from app.schemas.inventory import InventoryItemResponse
from app.services.invoice_editor import filter_inventory
from app.services.record_store import RecordStore

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("", response_model=List[InventoryItemResponse])
def list_inventory(
    search: Optional[str] = Query(None, description="Match name, description or category (in-stock items only)"),
    in_stock: bool = Query(False, description="Only items with quantity above zero"),
    db: Session = Depends(get_db),
    context: UserContext = Depends(get_user_context),
):
    """List the inventory catalog; with a search term only items in stock are returned"""
    items = RecordStore(db).fetch_records("inventory_items", context)
    if search is not None:
        items = filter_inventory(items, search)
    elif in_stock:
        items = [item for item in items if item.quantity > 0]
    return items
