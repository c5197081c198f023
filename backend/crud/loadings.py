"""
Loading and loading-item operations.

Each mutating function is one transaction: it locks the parent loading row, changes
the item set, re-derives every aggregate from the full item set and commits once. Any
error rolls the session back before it propagates, so a rejected edit leaves neither
the item nor the loading touched.
"""
from datetime import date
from typing import Optional
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from crud.audit_log import create_audit_log
from crud.parties import resolve_loading_party
from crud.stock import validate_client_allocation
from schemas.audit_log import AuditLogCreate
from schemas import loadings as schemas
from models.loadings import Loading, LoadingSource
from models.loading_items import LoadingItem
from models.dispatch_charges import DispatchCharge
from models.packing_amounts import PackingAmount
from utils import sqlalchemy_to_dict
from utils.billing import (
    as_decimal,
    base_amount,
    grand_total,
    has_vehicle,
    is_vendor_source,
    price_line_item,
    round2,
    summarize_items,
    to_decimal,
)
from utils.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger("loadings")


def get_loading(db: Session, loading_id: int, tenant_id: str) -> Loading:
    db_loading = (
        db.query(Loading)
        .filter(Loading.id == loading_id, Loading.tenant_id == tenant_id)
        .options(selectinload(Loading.items))
        .first()
    )
    if not db_loading:
        raise NotFoundError(f"Loading {loading_id} not found")
    return db_loading


def get_loadings(
    db: Session,
    tenant_id: str,
    source: Optional[LoadingSource] = None,
    party_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
):
    query = db.query(Loading).filter(Loading.tenant_id == tenant_id)
    if source:
        query = query.filter(Loading.source == source)
    if party_id is not None:
        query = query.filter(Loading.party_id == party_id)
    if start_date:
        query = query.filter(Loading.loading_date >= start_date)
    if end_date:
        query = query.filter(Loading.loading_date <= end_date)
    return (
        query.options(selectinload(Loading.items))
        .order_by(Loading.loading_date.desc(), Loading.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def lock_loading(db: Session, loading_id: int, tenant_id: str) -> Loading:
    """Fetch the loading row FOR UPDATE; concurrent edits of one bill serialize here."""
    db_loading = (
        db.query(Loading)
        .filter(Loading.id == loading_id, Loading.tenant_id == tenant_id)
        .with_for_update()
        .first()
    )
    if not db_loading:
        raise NotFoundError(f"Loading {loading_id} not found")
    return db_loading


def _charge_sum(db: Session, column, ref_column, loading_id: int):
    return as_decimal(
        db.query(func.coalesce(func.sum(column), 0)).filter(ref_column == loading_id).scalar()
    )


def refresh_loading_totals(db: Session, db_loading: Loading) -> Loading:
    """
    Re-derive every aggregate of a loading from its rows.

    Item totals come from the current item set, charge totals from the charge tables.
    Running it twice in a row yields the same values.
    """
    db.flush()
    items = db.query(LoadingItem).filter(LoadingItem.loading_id == db_loading.id).all()
    totals = summarize_items(items)
    dispatch_total = round2(_charge_sum(db, DispatchCharge.amount, DispatchCharge.source_record_id, db_loading.id))
    packing_total = round2(_charge_sum(db, PackingAmount.total_amount, PackingAmount.source_record_id, db_loading.id))

    db_loading.total_trays = totals.total_trays
    db_loading.total_loose_kgs = totals.total_loose_kgs
    db_loading.total_tray_kgs = totals.total_tray_kgs
    db_loading.total_kgs = totals.total_kgs
    db_loading.total_price = totals.total_price
    db_loading.dispatch_charges_total = dispatch_total
    db_loading.packing_amount_total = packing_total
    db_loading.grand_total = grand_total(
        base_amount(db_loading.source, totals, has_vehicle(db_loading.vehicle_id, db_loading.vehicle_no)),
        dispatch_total,
        packing_total,
    )
    db.flush()
    return db_loading


def _new_item(item_data: schemas.LoadingItemCreate, source: LoadingSource, tenant_id: str, user_id: str) -> LoadingItem:
    variety_code = (item_data.variety_code or "").strip()
    if not variety_code:
        raise ValidationError("Variety code is required")
    priced = price_line_item(item_data.no_trays, item_data.loose, item_data.price_per_kg, source)
    return LoadingItem(
        variety_code=variety_code,
        no_trays=priced.no_trays,
        tray_kgs=priced.tray_kgs,
        loose=priced.loose,
        total_kgs=priced.total_kgs,
        price_per_kg=priced.price_per_kg,
        total_price=priced.total_price,
        tenant_id=tenant_id,
        created_by=user_id,
    )


def create_loading(db: Session, loading: schemas.LoadingCreate, tenant_id: str, user_id: str) -> Loading:
    bill_no = (loading.bill_no or "").strip()
    if not bill_no:
        raise ValidationError("Bill number is required")
    if loading.loading_date is None:
        raise ValidationError("Loading date is required")
    if not loading.items:
        raise ValidationError("A loading must contain at least one item")

    try:
        party_id, party_name = resolve_loading_party(db, tenant_id, loading.source, loading.party_id, loading.party_name)

        duplicate = db.query(Loading.id).filter(
            Loading.tenant_id == tenant_id,
            Loading.source == loading.source,
            Loading.bill_no == bill_no,
        ).first()
        if duplicate:
            raise ConflictError(f"Bill number {bill_no} already exists", bill_no=bill_no)

        db_items = [_new_item(item, loading.source, tenant_id, user_id) for item in loading.items]

        vehicle_id = (loading.vehicle_id or "").strip() or None
        db_loading = Loading(
            source=loading.source,
            bill_no=bill_no,
            party_id=party_id,
            party_name=party_name,
            village=loading.village,
            fish_code=loading.fish_code,
            loading_date=loading.loading_date,
            vehicle_id=vehicle_id,
            # A registered vehicle wins over a free-text number
            vehicle_no=None if vehicle_id else ((loading.vehicle_no or "").strip() or None),
            tenant_id=tenant_id,
            created_by=user_id,
        )
        db.add(db_loading)
        db.flush()

        for db_item in db_items:
            db_item.loading_id = db_loading.id
            db.add(db_item)
        refresh_loading_totals(db, db_loading)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Bill number {bill_no} already exists", bill_no=bill_no)
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"{loading.source.value.capitalize()} loading {db_loading.id} (bill {bill_no}) created with "
        f"{len(db_items)} items, grand total {db_loading.grand_total}, by {user_id} for tenant {tenant_id}"
    )
    return get_loading(db, db_loading.id, tenant_id)


def add_item(db: Session, loading_id: int, item: schemas.LoadingItemCreate, tenant_id: str, user_id: str) -> LoadingItem:
    try:
        db_loading = lock_loading(db, loading_id, tenant_id)
        db_item = _new_item(item, db_loading.source, tenant_id, user_id)
        db_item.loading_id = db_loading.id
        db.add(db_item)
        refresh_loading_totals(db, db_loading)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_item)
    logger.info(f"Item {db_item.id} added to loading {loading_id} by {user_id} for tenant {tenant_id}")
    return db_item


def _get_item(db: Session, item_id: int, tenant_id: str) -> LoadingItem:
    db_item = db.query(LoadingItem).filter(LoadingItem.id == item_id, LoadingItem.tenant_id == tenant_id).first()
    if not db_item:
        raise NotFoundError(f"Item {item_id} not found")
    return db_item


def update_item(db: Session, item_id: int, item_update: schemas.LoadingItemUpdate, tenant_id: str, user_id: str) -> LoadingItem:
    """
    Apply a partial edit to one item and re-derive the parent totals.

    Client items are checked against available stock whenever their weight or variety
    changes; a price-only edit never is.
    """
    update_data = item_update.model_dump(exclude_unset=True)
    try:
        db_item = _get_item(db, item_id, tenant_id)
        db_loading = lock_loading(db, db_item.loading_id, tenant_id)
        source = db_loading.source

        if update_data.get("total_price") is not None and is_vendor_source(source):
            raise ValidationError("Total price can only be set directly on client items")

        variety_code = (update_data.get("variety_code") or db_item.variety_code).strip()
        no_trays = update_data["no_trays"] if update_data.get("no_trays") is not None else db_item.no_trays
        loose = update_data["loose"] if update_data.get("loose") is not None else db_item.loose
        price_per_kg = update_data["price_per_kg"] if update_data.get("price_per_kg") is not None else db_item.price_per_kg

        priced = price_line_item(no_trays, loose, price_per_kg, source)
        quantity_changed = (
            priced.no_trays != db_item.no_trays or priced.loose != as_decimal(db_item.loose)
        )
        variety_changed = variety_code != db_item.variety_code
        if source == LoadingSource.CLIENT and (quantity_changed or variety_changed):
            validate_client_allocation(db, tenant_id, variety_code, priced.total_kgs, db_item.id)

        old_values = sqlalchemy_to_dict(db_item)
        db_item.variety_code = variety_code
        db_item.no_trays = priced.no_trays
        db_item.tray_kgs = priced.tray_kgs
        db_item.loose = priced.loose
        db_item.total_kgs = priced.total_kgs
        db_item.price_per_kg = priced.price_per_kg
        if update_data.get("total_price") is not None:
            # Already-weighed client bill priced by hand
            db_item.total_price = round2(to_decimal(update_data["total_price"]))
        else:
            db_item.total_price = priced.total_price
        db_item.updated_by = user_id
        db.flush()

        create_audit_log(db=db, log_entry=AuditLogCreate(
            table_name='loading_items',
            record_id=item_id,
            changed_by=user_id,
            action='UPDATE',
            old_values=old_values,
            new_values=sqlalchemy_to_dict(db_item),
            tenant_id=tenant_id,
        ))
        refresh_loading_totals(db, db_loading)
        db_loading.updated_by = user_id
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_item)
    logger.info(f"Item {item_id} of loading {db_item.loading_id} updated by {user_id} for tenant {tenant_id}")
    return db_item


def _detach_charges(db: Session, loading_id: int, tenant_id: str):
    # Charges outlive the bill they were raised against
    for model in (DispatchCharge, PackingAmount):
        db.query(model).filter(
            model.source_record_id == loading_id,
            model.tenant_id == tenant_id,
        ).update({model.source_record_id: None}, synchronize_session=False)


def delete_item(db: Session, item_id: int, tenant_id: str, user_id: str) -> dict:
    """Delete an item; removing the last item removes the loading as well."""
    try:
        db_item = _get_item(db, item_id, tenant_id)
        loading_id = db_item.loading_id
        db_loading = lock_loading(db, loading_id, tenant_id)

        create_audit_log(db=db, log_entry=AuditLogCreate(
            table_name='loading_items',
            record_id=item_id,
            changed_by=user_id,
            action='DELETE',
            old_values=sqlalchemy_to_dict(db_item),
            tenant_id=tenant_id,
        ))
        db.delete(db_item)
        db.flush()

        remaining = db.query(func.count(LoadingItem.id)).filter(LoadingItem.loading_id == loading_id).scalar()
        deleted_parent = remaining == 0
        if deleted_parent:
            _detach_charges(db, loading_id, tenant_id)
            create_audit_log(db=db, log_entry=AuditLogCreate(
                table_name='loadings',
                record_id=loading_id,
                changed_by=user_id,
                action='DELETE',
                old_values=sqlalchemy_to_dict(db_loading),
                tenant_id=tenant_id,
            ))
            db.delete(db_loading)
        else:
            refresh_loading_totals(db, db_loading)
            db_loading.updated_by = user_id
        db.commit()
    except Exception:
        db.rollback()
        raise

    if deleted_parent:
        logger.info(f"Item {item_id} was the last item; loading {loading_id} deleted by {user_id} for tenant {tenant_id}")
    else:
        logger.info(f"Item {item_id} deleted from loading {loading_id} by {user_id} for tenant {tenant_id}")
    return {"item_id": item_id, "loading_id": loading_id, "deleted_parent_loading": deleted_parent}


def recompute_loading(db: Session, loading_id: int, tenant_id: str, user_id: str) -> Loading:
    try:
        db_loading = lock_loading(db, loading_id, tenant_id)
        refresh_loading_totals(db, db_loading)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Loading {loading_id} totals recomputed by {user_id} for tenant {tenant_id}: grand total {db_loading.grand_total}")
    return get_loading(db, loading_id, tenant_id)
