from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal


class InventoryItemResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    category: Optional[str]
    unit_price: Decimal
    quantity: int
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
