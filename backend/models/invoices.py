from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class InvoiceColumns(TimestampMixin):
    id = Column(Integer, primary_key=True, index=True)
    invoice_no = Column(Integer, nullable=False, index=True)  # Tenant-specific sequential number
    invoice_date = Column(Date, nullable=False)
    party_name = Column(String, nullable=False)
    address = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    is_finalized = Column(Boolean, default=True, nullable=False)
    tenant_id = Column(String, index=True)


class VendorInvoice(Base, InvoiceColumns):
    __tablename__ = "vendor_invoices"
    __table_args__ = (UniqueConstraint('tenant_id', 'invoice_no', name='_tenant_vendor_invoice_no_uc'),)

    payment_id = Column(Integer, ForeignKey("vendor_payments.id"), nullable=False, unique=True)

    payment = relationship("VendorPayment")


class ClientInvoice(Base, InvoiceColumns):
    __tablename__ = "client_invoices"
    __table_args__ = (UniqueConstraint('tenant_id', 'invoice_no', name='_tenant_client_invoice_no_uc'),)

    payment_id = Column(Integer, ForeignKey("client_payments.id"), nullable=False, unique=True)

    payment = relationship("ClientPayment")
