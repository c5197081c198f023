from sqlalchemy import Column, Integer, Numeric, Date, String, Text, ForeignKey, Enum, Boolean
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin
from models.payment_mode import PaymentMode
import enum


class PaymentKind(str, enum.Enum):
    CLIENT = "client"  # received from a client
    VENDOR = "vendor"  # paid out to a farmer or agent


class PaymentColumns(TimestampMixin):
    """Ledger columns shared by client and vendor payments. Rows are append-only."""
    id = Column(Integer, primary_key=True, index=True)
    payment_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_mode = Column(Enum(PaymentMode), default=PaymentMode.CASH, nullable=False)
    reference = Column(String, nullable=True)  # Cheque number, UTR, transaction ID etc.
    image_url = Column(String(500), nullable=True)
    is_installment = Column(Boolean, default=False, nullable=False)
    tenant_id = Column(String, index=True)


class ClientPayment(Base, PaymentColumns):
    __tablename__ = "client_payments"

    client_id = Column(Integer, ForeignKey("parties.id"), nullable=False, index=True)

    # Relationships
    client = relationship("Party")

    @property
    def party_id(self):
        return self.client_id


class VendorPayment(Base, PaymentColumns):
    __tablename__ = "vendor_payments"

    vendor_id = Column(Integer, ForeignKey("parties.id"), nullable=False, index=True)

    # Bank the money was sent to
    account_number = Column(String, nullable=True)
    ifsc = Column(String(11), nullable=True)
    bank_name = Column(String, nullable=True)
    bank_address = Column(Text, nullable=True)
    payment_details = Column(Text, nullable=True)

    # Set when is_installment: planned count and which one this is
    installments = Column(Integer, nullable=True)
    installment_number = Column(Integer, nullable=True)

    # Relationships
    vendor = relationship("Party")

    @property
    def party_id(self):
        return self.vendor_id
