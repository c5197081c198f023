from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from decimal import Decimal


class InvoiceUpsert(BaseModel):
    payment_id: int
    description: Optional[str] = None
    address: Optional[str] = None


class Invoice(BaseModel):
    id: int
    payment_id: int
    invoice_no: int
    invoice_date: date
    party_name: str
    address: Optional[str] = None
    description: Optional[str] = None
    total_amount: Decimal
    is_finalized: bool
    tenant_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
