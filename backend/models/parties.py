from sqlalchemy import Column, Integer, String, Text, Enum
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class PartyType(enum.Enum):
    FARMER = "Farmer"
    AGENT = "Agent"
    CLIENT = "Client"


class PartyStatus(enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


VENDOR_PARTY_TYPES = (PartyType.FARMER, PartyType.AGENT)


class Party(Base, TimestampMixin):
    __tablename__ = "parties"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    party_type = Column(Enum(PartyType), nullable=False)
    phone = Column(String, nullable=True)
    village = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    email = Column(String, nullable=True)
    status = Column(Enum(PartyStatus), default=PartyStatus.ACTIVE, nullable=False)

    # Relationships
    loadings = relationship("Loading", back_populates="party")

    @property
    def is_vendor(self) -> bool:
        return self.party_type in VENDOR_PARTY_TYPES
