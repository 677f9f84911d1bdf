from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ClientCreate(BaseModel):
    company_name: str = Field(..., min_length=1)
    contact_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    address: Optional[str] = None


class ClientResponse(BaseModel):
    id: int
    user_id: Optional[int]
    company_name: str
    contact_name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
