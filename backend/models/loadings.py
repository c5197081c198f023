from sqlalchemy import Column, Integer, String, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class LoadingSource(enum.Enum):
    FARMER = "farmer"   # incoming from farmer
    AGENT = "agent"     # incoming from agent
    CLIENT = "client"   # outgoing to client


class Loading(Base, TimestampMixin):
    __tablename__ = "loadings"
    __table_args__ = (UniqueConstraint('tenant_id', 'source', 'bill_no', name='_tenant_source_bill_no_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    source = Column(Enum(LoadingSource), nullable=False, index=True)
    bill_no = Column(String, nullable=False, index=True)
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=True, index=True)
    party_name = Column(String, nullable=False)
    village = Column(String, nullable=True)
    fish_code = Column(String, nullable=True)
    loading_date = Column(Date, nullable=False, index=True)
    vehicle_id = Column(String, nullable=True)
    vehicle_no = Column(String, nullable=True)

    # Aggregates, always re-summed from the item set
    total_trays = Column(Integer, default=0, nullable=False)
    total_loose_kgs = Column(Numeric(12, 3), default=0, nullable=False)
    total_tray_kgs = Column(Numeric(12, 3), default=0, nullable=False)
    total_kgs = Column(Numeric(12, 3), default=0, nullable=False)
    total_price = Column(Numeric(12, 2), default=0, nullable=False)

    # Denormalized charge sums; dispatch_charges/packing_amounts are the source of truth
    dispatch_charges_total = Column(Numeric(12, 2), default=0, nullable=False)
    packing_amount_total = Column(Numeric(12, 2), default=0, nullable=False)
    grand_total = Column(Numeric(12, 2), default=0, nullable=False)
    tenant_id = Column(String, index=True)

    # Relationships
    party = relationship("Party", back_populates="loadings")
    items = relationship(
        "LoadingItem",
        back_populates="loading",
        cascade="all, delete-orphan",
        order_by="LoadingItem.id",
    )
