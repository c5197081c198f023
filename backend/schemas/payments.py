from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.payment_mode import PaymentMode

# Only vendor payouts carry bank and installment details
VENDOR_ONLY_FIELDS = (
    "account_number",
    "ifsc",
    "bank_name",
    "bank_address",
    "payment_details",
    "installments",
    "installment_number",
)


class PaymentBase(BaseModel):
    party_id: int
    payment_date: date
    amount: Decimal
    payment_mode: PaymentMode = PaymentMode.CASH
    reference: Optional[str] = None
    image_url: Optional[str] = None
    is_installment: bool = False
    account_number: Optional[str] = None
    ifsc: Optional[str] = None
    bank_name: Optional[str] = None
    bank_address: Optional[str] = None
    payment_details: Optional[str] = None
    installments: Optional[int] = None
    installment_number: Optional[int] = None


class PaymentCreate(PaymentBase):
    @field_validator("reference", "account_number", "bank_name", "bank_address", "payment_details", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("ifsc", mode="before")
    @classmethod
    def normalize_ifsc(cls, v):
        if v is None:
            return None
        v = str(v).strip().upper()
        return v or None


class Payment(PaymentBase):
    id: int
    created_at: datetime
    tenant_id: Optional[str] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True


class ProofUploadRequest(BaseModel):
    filename: str


class ProofUploadUrl(BaseModel):
    upload_url: str
    s3_path: str


class ProofDownloadUrl(BaseModel):
    download_url: str
