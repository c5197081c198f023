from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Enum
from database import Base
from models.audit_mixin import TimestampMixin
from models.payment_mode import PaymentMode


class PackingAmount(Base, TimestampMixin):
    __tablename__ = "packing_amounts"

    id = Column(Integer, primary_key=True, index=True)
    source_record_id = Column(Integer, ForeignKey("loadings.id", ondelete="SET NULL"), nullable=True, index=True)
    ice_blocks = Column(Integer, nullable=True)
    price_per_block = Column(Numeric(12, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_mode = Column(Enum(PaymentMode), default=PaymentMode.CASH, nullable=False)
    reference = Column(String, nullable=True)
    tenant_id = Column(String, index=True)
