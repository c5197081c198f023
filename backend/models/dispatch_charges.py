from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, Enum
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class DispatchChargeType(enum.Enum):
    ICE_COOLING = "ICE_COOLING"
    TRANSPORT = "TRANSPORT"
    OTHER = "OTHER"


class DispatchCharge(Base, TimestampMixin):
    __tablename__ = "dispatch_charges"

    id = Column(Integer, primary_key=True, index=True)
    # Weak reference: nulled when the loading is deleted so the charge history survives
    source_record_id = Column(Integer, ForeignKey("loadings.id", ondelete="SET NULL"), nullable=True, index=True)
    type = Column(Enum(DispatchChargeType), nullable=False)
    label = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text, nullable=True)
    tenant_id = Column(String, index=True)
