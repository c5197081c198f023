from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from models.parties import PartyType, PartyStatus


class PartyBase(BaseModel):
    name: str
    party_type: PartyType
    phone: Optional[str] = None
    village: Optional[str] = None
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    status: PartyStatus = PartyStatus.ACTIVE


class PartyCreate(PartyBase):
    pass


class PartyUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    village: Optional[str] = None
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    status: Optional[PartyStatus] = None


class Party(PartyBase):
    id: int
    tenant_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
