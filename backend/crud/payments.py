from datetime import date
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from crud.parties import get_party
from models.parties import PartyType, VENDOR_PARTY_TYPES
from models.payments import ClientPayment, PaymentKind, VendorPayment
from schemas import payments as schemas
from utils.billing import as_decimal, round2
from utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger("payments")

PAYMENT_MODELS = {
    PaymentKind.CLIENT: ClientPayment,
    PaymentKind.VENDOR: VendorPayment,
}


def party_column(kind: PaymentKind):
    return ClientPayment.client_id if kind == PaymentKind.CLIENT else VendorPayment.vendor_id


def _check_party_kind(db: Session, kind: PaymentKind, party_id: int, tenant_id: str):
    db_party = get_party(db, party_id, tenant_id)
    if kind == PaymentKind.CLIENT and db_party.party_type != PartyType.CLIENT:
        raise ValidationError(f"Party {party_id} is not a client")
    if kind == PaymentKind.VENDOR and db_party.party_type not in VENDOR_PARTY_TYPES:
        raise ValidationError(f"Party {party_id} is not a farmer or agent")
    return db_party


def _check_vendor_details(kind: PaymentKind, payment: schemas.PaymentCreate):
    if kind == PaymentKind.CLIENT:
        given = [field for field in schemas.VENDOR_ONLY_FIELDS if getattr(payment, field) is not None]
        if given:
            raise ValidationError(f"Client payments do not take {', '.join(given)}")
        return
    if payment.installments is not None and payment.installments < 1:
        raise ValidationError("Installments must be at least 1")
    if payment.installment_number is not None:
        if payment.installment_number < 1:
            raise ValidationError("Installment number must be at least 1")
        if payment.installments is not None and payment.installment_number > payment.installments:
            raise ValidationError(
                f"Installment {payment.installment_number} is beyond the {payment.installments} planned"
            )


def record_payment(db: Session, kind: PaymentKind, payment: schemas.PaymentCreate, tenant_id: str, user_id: str):
    """
    Append a payment to the client or vendor ledger. Payments are never edited afterwards.

    Vendor payouts may also record the receiving bank account and installment position.
    """
    amount = as_decimal(payment.amount)
    if amount <= 0:
        raise ValidationError("Payment amount must be greater than zero")
    _check_vendor_details(kind, payment)
    _check_party_kind(db, kind, payment.party_id, tenant_id)

    model = PAYMENT_MODELS[kind]
    exclude = {"party_id", "amount"}
    if kind == PaymentKind.CLIENT:
        exclude.update(schemas.VENDOR_ONLY_FIELDS)
    data = payment.model_dump(exclude=exclude)
    party_field = "client_id" if kind == PaymentKind.CLIENT else "vendor_id"
    db_payment = model(
        **data,
        amount=round2(amount),
        tenant_id=tenant_id,
        created_by=user_id,
    )
    setattr(db_payment, party_field, payment.party_id)
    try:
        db.add(db_payment)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_payment)
    logger.info(
        f"{kind.value.capitalize()} payment {db_payment.id} of {db_payment.amount} ({db_payment.payment_mode.value}) "
        f"recorded for party {payment.party_id} by {user_id} for tenant {tenant_id}"
    )
    return db_payment


def get_payment(db: Session, kind: PaymentKind, payment_id: int, tenant_id: str):
    model = PAYMENT_MODELS[kind]
    db_payment = db.query(model).filter(model.id == payment_id, model.tenant_id == tenant_id).first()
    if not db_payment:
        raise NotFoundError(f"{kind.value.capitalize()} payment {payment_id} not found")
    return db_payment


def get_payments(
    db: Session,
    kind: PaymentKind,
    tenant_id: str,
    party_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
) -> List:
    model = PAYMENT_MODELS[kind]
    query = db.query(model).filter(model.tenant_id == tenant_id)
    if party_id is not None:
        query = query.filter(party_column(kind) == party_id)
    if start_date:
        query = query.filter(model.payment_date >= start_date)
    if end_date:
        query = query.filter(model.payment_date <= end_date)
    return query.order_by(model.payment_date.desc(), model.id.desc()).offset(skip).limit(limit).all()
