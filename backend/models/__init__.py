from models.parties import Party
from models.loadings import Loading
from models.loading_items import LoadingItem
from models.dispatch_charges import DispatchCharge
from models.packing_amounts import PackingAmount
from models.payments import ClientPayment, VendorPayment
from models.invoices import ClientInvoice, VendorInvoice
from models.audit_log import AuditLog

__all__ = ['AuditLog', 'ClientInvoice', 'ClientPayment', 'DispatchCharge', 'Loading', 'LoadingItem', 'PackingAmount', 'Party', 'VendorInvoice', 'VendorPayment',]
