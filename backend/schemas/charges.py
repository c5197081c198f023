from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal
from models.dispatch_charges import DispatchChargeType
from models.payment_mode import PaymentMode


class DispatchChargeCreate(BaseModel):
    source_record_id: int
    type: DispatchChargeType
    amount: Decimal
    label: Optional[str] = None
    notes: Optional[str] = None


class DispatchCharge(DispatchChargeCreate):
    id: int
    source_record_id: Optional[int] = None
    tenant_id: Optional[str] = None
    created_at: datetime
    created_by: Optional[str] = None

    class Config:
        from_attributes = True


class PackingAmountCreate(BaseModel):
    source_record_id: Optional[int] = None
    ice_blocks: Optional[int] = None
    price_per_block: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    payment_mode: PaymentMode = PaymentMode.CASH
    reference: Optional[str] = None


class PackingAmount(BaseModel):
    id: int
    source_record_id: Optional[int] = None
    ice_blocks: Optional[int] = None
    price_per_block: Optional[Decimal] = None
    total_amount: Decimal
    payment_mode: PaymentMode
    reference: Optional[str] = None
    tenant_id: Optional[str] = None
    created_at: datetime
    created_by: Optional[str] = None

    class Config:
        from_attributes = True
