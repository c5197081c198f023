from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from models.loadings import LoadingSource
from utils.billing import to_decimal, to_tray_count


class LoadingItemCreate(BaseModel):
    variety_code: str
    no_trays: int = 0
    loose: Decimal = Decimal(0)
    price_per_kg: Decimal = Decimal(0)

    # Scale readings arrive as free text from the loading form
    @field_validator("no_trays", mode="before")
    @classmethod
    def coerce_trays(cls, v):
        return to_tray_count(v)

    @field_validator("loose", "price_per_kg", mode="before")
    @classmethod
    def coerce_amounts(cls, v):
        return to_decimal(v)


class LoadingItemUpdate(BaseModel):
    variety_code: Optional[str] = None
    no_trays: Optional[int] = None
    loose: Optional[Decimal] = None
    price_per_kg: Optional[Decimal] = None
    total_price: Optional[Decimal] = None  # client bills only

    @field_validator("no_trays", mode="before")
    @classmethod
    def coerce_trays(cls, v):
        return None if v is None else to_tray_count(v)

    @field_validator("loose", "price_per_kg", "total_price", mode="before")
    @classmethod
    def coerce_amounts(cls, v):
        return None if v is None else to_decimal(v)


class LoadingItem(BaseModel):
    id: int
    loading_id: int
    variety_code: str
    no_trays: int
    tray_kgs: Decimal
    loose: Decimal
    total_kgs: Decimal
    price_per_kg: Decimal
    total_price: Decimal
    tenant_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True


class LoadingCreate(BaseModel):
    source: LoadingSource
    bill_no: Optional[str] = None
    party_id: Optional[int] = None
    party_name: Optional[str] = None
    village: Optional[str] = None
    fish_code: Optional[str] = None
    loading_date: Optional[date] = None
    vehicle_id: Optional[str] = None
    vehicle_no: Optional[str] = None
    items: List[LoadingItemCreate] = []


class Loading(BaseModel):
    id: int
    source: LoadingSource
    bill_no: str
    party_id: Optional[int] = None
    party_name: str
    village: Optional[str] = None
    fish_code: Optional[str] = None
    loading_date: date
    vehicle_id: Optional[str] = None
    vehicle_no: Optional[str] = None
    total_trays: int
    total_loose_kgs: Decimal
    total_tray_kgs: Decimal
    total_kgs: Decimal
    total_price: Decimal
    dispatch_charges_total: Decimal
    packing_amount_total: Decimal
    grand_total: Decimal
    tenant_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    items: List[LoadingItem] = []

    class Config:
        from_attributes = True


class ItemDeleteResult(BaseModel):
    item_id: int
    loading_id: int
    deleted_parent_loading: bool
