import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from crud.payments import get_payment
from models.invoices import ClientInvoice, VendorInvoice
from models.payments import PaymentKind
from schemas.audit_log import AuditLogCreate
from schemas import invoices as schemas
from utils import sqlalchemy_to_dict
from utils.exceptions import ConflictError, NotFoundError
from utils.receipt_utils import render_invoice_pdf

logger = logging.getLogger("invoices")

INVOICE_MODELS = {
    PaymentKind.CLIENT: ClientInvoice,
    PaymentKind.VENDOR: VendorInvoice,
}


def get_invoice_by_payment(db: Session, kind: PaymentKind, payment_id: int, tenant_id: str):
    model = INVOICE_MODELS[kind]
    db_invoice = db.query(model).filter(model.payment_id == payment_id, model.tenant_id == tenant_id).first()
    if not db_invoice:
        raise NotFoundError(f"No {kind.value} invoice for payment {payment_id}")
    return db_invoice


def _next_invoice_no(db: Session, kind: PaymentKind, tenant_id: str) -> int:
    model = INVOICE_MODELS[kind]
    last_invoice_no = db.query(func.max(model.invoice_no)).filter(model.tenant_id == tenant_id).scalar() or 0
    return last_invoice_no + 1


def upsert_invoice(db: Session, kind: PaymentKind, invoice: schemas.InvoiceUpsert, tenant_id: str, user_id: str):
    """
    Issue the invoice for a payment, or re-issue it.

    One invoice per payment: re-issuing keeps the number first assigned and refreshes
    the amount, date and party details from the payment.
    """
    model = INVOICE_MODELS[kind]
    try:
        db_payment = get_payment(db, kind, invoice.payment_id, tenant_id)
        db_party = db_payment.client if kind == PaymentKind.CLIENT else db_payment.vendor
        values = {
            "invoice_date": db_payment.payment_date,
            "party_name": db_party.name,
            "address": invoice.address if invoice.address is not None else db_party.address,
            "description": invoice.description,
            "total_amount": db_payment.amount,
        }

        db_invoice = (
            db.query(model)
            .filter(model.payment_id == db_payment.id, model.tenant_id == tenant_id)
            .with_for_update()
            .first()
        )
        if db_invoice:
            old_values = sqlalchemy_to_dict(db_invoice)
            for key, value in values.items():
                setattr(db_invoice, key, value)
            db_invoice.updated_by = user_id
            db.flush()
            create_audit_log(db=db, log_entry=AuditLogCreate(
                table_name=model.__tablename__,
                record_id=db_invoice.id,
                changed_by=user_id,
                action='UPDATE',
                old_values=old_values,
                new_values=sqlalchemy_to_dict(db_invoice),
                tenant_id=tenant_id,
            ))
            action = "re-issued"
        else:
            db_invoice = model(
                payment_id=db_payment.id,
                invoice_no=_next_invoice_no(db, kind, tenant_id),
                tenant_id=tenant_id,
                created_by=user_id,
                **values,
            )
            db.add(db_invoice)
            action = "issued"
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Invoice for payment {invoice.payment_id} was issued concurrently; retry")
    except Exception:
        db.rollback()
        raise
    db.refresh(db_invoice)
    logger.info(
        f"{kind.value.capitalize()} invoice {db_invoice.invoice_no} {action} for payment {invoice.payment_id} "
        f"by {user_id} for tenant {tenant_id}"
    )
    return db_invoice


def render_invoice(db: Session, kind: PaymentKind, payment_id: int, tenant_id: str) -> bytes:
    db_invoice = get_invoice_by_payment(db, kind, payment_id, tenant_id)
    return render_invoice_pdf(db_invoice, db_invoice.payment, kind.value)
