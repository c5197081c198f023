from sqlalchemy import Column, Integer, Numeric, ForeignKey, String
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class LoadingItem(Base, TimestampMixin):
    __tablename__ = "loading_items"

    id = Column(Integer, primary_key=True, index=True)
    loading_id = Column(Integer, ForeignKey("loadings.id", ondelete="CASCADE"), nullable=False, index=True)
    variety_code = Column(String, nullable=False, index=True)
    no_trays = Column(Integer, default=0, nullable=False)
    tray_kgs = Column(Numeric(12, 3), default=0, nullable=False)  # no_trays * TRAY_KG
    loose = Column(Numeric(12, 3), default=0, nullable=False)
    total_kgs = Column(Numeric(12, 3), default=0, nullable=False)  # tray_kgs + loose
    price_per_kg = Column(Numeric(12, 4), default=0, nullable=False)  # entered rate, kept unrounded
    total_price = Column(Numeric(12, 2), default=0, nullable=False)  # stored net price, not recomputed on read
    tenant_id = Column(String, index=True)

    # Relationships
    loading = relationship("Loading", back_populates="items")
