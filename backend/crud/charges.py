from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from crud.loadings import lock_loading, refresh_loading_totals
from models.dispatch_charges import DispatchCharge, DispatchChargeType
from models.loadings import Loading, LoadingSource
from models.packing_amounts import PackingAmount
from models.payment_mode import PaymentMode
from schemas import charges as schemas
from utils.billing import DEFAULT_ICE_BLOCK_PRICE, ZERO, as_decimal, has_vehicle, round2, to_decimal
from utils.exceptions import (
    BusinessRuleError,
    PACKING_REQUIRED,
    VEHICLE_REQUIRED,
    ValidationError,
)

logger = logging.getLogger("charges")


def _lock_client_loading(db: Session, loading_id: int, tenant_id: str) -> Loading:
    db_loading = lock_loading(db, loading_id, tenant_id)
    if db_loading.source != LoadingSource.CLIENT:
        raise ValidationError(
            f"Dispatch and packing charges can only be recorded against client loadings, "
            f"loading {db_loading.id} is a {db_loading.source.value} loading"
        )
    return db_loading


def get_dispatch_charges(db: Session, tenant_id: str, source_record_id: Optional[int] = None) -> List[DispatchCharge]:
    query = db.query(DispatchCharge).filter(DispatchCharge.tenant_id == tenant_id)
    if source_record_id is not None:
        query = query.filter(DispatchCharge.source_record_id == source_record_id)
    return query.order_by(DispatchCharge.id).all()


def get_packing_amounts(db: Session, tenant_id: str, source_record_id: Optional[int] = None) -> List[PackingAmount]:
    query = db.query(PackingAmount).filter(PackingAmount.tenant_id == tenant_id)
    if source_record_id is not None:
        query = query.filter(PackingAmount.source_record_id == source_record_id)
    return query.order_by(PackingAmount.id).all()


def post_dispatch_charge(db: Session, charge: schemas.DispatchChargeCreate, tenant_id: str, user_id: str) -> DispatchCharge:
    """
    Record an ice/transport/other charge against a loading and refresh its grand total.

    Raises:
        ValidationError: non-positive amount, an OTHER charge without a label, or a
            farmer/agent loading.
        BusinessRuleError: TRANSPORT on a loading without a vehicle, or no packing yet.
    """
    amount = as_decimal(charge.amount)
    if amount <= 0:
        raise ValidationError("Charge amount must be greater than zero")
    label = (charge.label or "").strip() or None
    if charge.type == DispatchChargeType.OTHER and not label:
        raise ValidationError("A label is required for OTHER charges")

    try:
        db_loading = _lock_client_loading(db, charge.source_record_id, tenant_id)

        if charge.type == DispatchChargeType.TRANSPORT and not has_vehicle(db_loading.vehicle_id, db_loading.vehicle_no):
            logger.warning(f"Transport charge rejected for loading {db_loading.id} (tenant {tenant_id}): no vehicle assigned")
            raise BusinessRuleError(
                "Transport charge not allowed: no vehicle is assigned to this loading",
                code=VEHICLE_REQUIRED,
            )

        packing_total = sum(
            (as_decimal(p.total_amount) for p in get_packing_amounts(db, tenant_id, db_loading.id)),
            ZERO,
        )
        if packing_total <= 0:
            logger.warning(f"Dispatch charge rejected for loading {db_loading.id} (tenant {tenant_id}): no packing amount recorded")
            raise BusinessRuleError(
                "Record the packing amount before adding dispatch charges",
                code=PACKING_REQUIRED,
            )

        db_charge = DispatchCharge(
            source_record_id=db_loading.id,
            type=charge.type,
            label=label,
            amount=round2(amount),
            notes=charge.notes,
            tenant_id=tenant_id,
            created_by=user_id,
        )
        db.add(db_charge)
        refresh_loading_totals(db, db_loading)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_charge)
    logger.info(
        f"{charge.type.value} charge {db_charge.id} of {db_charge.amount} posted to loading "
        f"{charge.source_record_id} by {user_id} for tenant {tenant_id}"
    )
    return db_charge


def _packing_total(packing: schemas.PackingAmountCreate):
    if packing.ice_blocks:
        price_per_block = to_decimal(packing.price_per_block) if packing.price_per_block is not None else DEFAULT_ICE_BLOCK_PRICE
        return packing.ice_blocks, price_per_block, round2(packing.ice_blocks * price_per_block)
    return packing.ice_blocks, packing.price_per_block, round2(to_decimal(packing.total_amount))


def post_packing_amount(db: Session, packing: schemas.PackingAmountCreate, tenant_id: str, user_id: str) -> PackingAmount:
    """Record an ice/packing amount; when linked to a loading its grand total is refreshed."""
    if packing.ice_blocks is not None and packing.ice_blocks < 0:
        raise ValidationError("Ice blocks cannot be negative")
    ice_blocks, price_per_block, total_amount = _packing_total(packing)
    if total_amount <= 0:
        raise ValidationError("Packing amount must be greater than zero")
    reference = (packing.reference or "").strip() or None
    if packing.payment_mode != PaymentMode.CASH and not reference:
        raise ValidationError(f"A reference is required for {packing.payment_mode.value} payments")

    try:
        db_loading = None
        if packing.source_record_id is not None:
            db_loading = _lock_client_loading(db, packing.source_record_id, tenant_id)

        db_packing = PackingAmount(
            source_record_id=db_loading.id if db_loading else None,
            ice_blocks=ice_blocks,
            price_per_block=price_per_block,
            total_amount=total_amount,
            payment_mode=packing.payment_mode,
            reference=reference,
            tenant_id=tenant_id,
            created_by=user_id,
        )
        db.add(db_packing)
        if db_loading is not None:
            refresh_loading_totals(db, db_loading)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_packing)
    logger.info(
        f"Packing amount {db_packing.id} of {db_packing.total_amount} recorded"
        f"{f' for loading {db_packing.source_record_id}' if db_packing.source_record_id else ''} "
        f"by {user_id} for tenant {tenant_id}"
    )
    return db_packing
