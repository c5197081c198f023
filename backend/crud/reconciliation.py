"""
Read-side reconciliation: what each party owes or is owed, how old the unpaid part is,
and the dashboard roll-up built from the same figures.

Payments are matched to bills by party only. A payment lowers the party's total due;
it is never pinned to a particular loading.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from crud.parties import get_party
from crud.payments import PAYMENT_MODELS, party_column
from crud.stock import VENDOR_SOURCES, get_stock_levels
from models.audit_mixin import now_ist
from models.loadings import Loading, LoadingSource
from models.loading_items import LoadingItem
from models.parties import PartyType
from models.payments import PaymentKind
from utils.billing import (
    AGEING_BUCKETS,
    ZERO,
    ageing_totals,
    as_decimal,
    outstanding,
    remaining_after_payments,
    round2,
)

logger = logging.getLogger("reconciliation")

TOP_VARIETIES = 6
DASHBOARD_DEFAULT_DAYS = 7


def today_ist() -> date:
    return now_ist().date()


def _sources_for(kind: PaymentKind):
    return (LoadingSource.CLIENT,) if kind == PaymentKind.CLIENT else VENDOR_SOURCES


def _loadings_query(db: Session, tenant_id: str, kind: PaymentKind, start_date: Optional[date], end_date: Optional[date]):
    query = db.query(Loading).filter(Loading.tenant_id == tenant_id, Loading.source.in_(_sources_for(kind)))
    if start_date:
        query = query.filter(Loading.loading_date >= start_date)
    if end_date:
        query = query.filter(Loading.loading_date <= end_date)
    return query


def _sum_payments(db: Session, tenant_id: str, kind: PaymentKind, party_id: Optional[int], start_date: Optional[date], end_date: Optional[date]):
    model = PAYMENT_MODELS[kind]
    query = db.query(func.coalesce(func.sum(model.amount), 0)).filter(model.tenant_id == tenant_id)
    if party_id is not None:
        query = query.filter(party_column(kind) == party_id)
    if start_date:
        query = query.filter(model.payment_date >= start_date)
    if end_date:
        query = query.filter(model.payment_date <= end_date)
    return as_decimal(query.scalar())


def get_outstanding(db: Session, tenant_id: str, party_id: int, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
    """Billed, paid and due (never negative) for one party, optionally within a date range."""
    db_party = get_party(db, party_id, tenant_id)
    kind = PaymentKind.CLIENT if db_party.party_type == PartyType.CLIENT else PaymentKind.VENDOR

    billed = as_decimal(
        _loadings_query(db, tenant_id, kind, start_date, end_date)
        .filter(Loading.party_id == party_id)
        .with_entities(func.coalesce(func.sum(Loading.grand_total), 0))
        .scalar()
    )
    paid = _sum_payments(db, tenant_id, kind, party_id, start_date, end_date)
    return {
        "party_id": party_id,
        "billed": round2(billed),
        "paid": round2(paid),
        "due": outstanding(billed, paid),
    }


def get_ageing_buckets(
    db: Session,
    tenant_id: str,
    kind: PaymentKind = PaymentKind.CLIENT,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    as_of: Optional[date] = None,
) -> dict:
    """
    Unpaid balance per age bucket, each bill aged from its own loading date.

    Each party's payments in the range settle that party's bills pro rata to their
    grand totals. Bills without a linked party have nothing paid against them.
    """
    as_of = as_of or today_ist()
    loadings = _loadings_query(db, tenant_id, kind, start_date, end_date).all()

    by_party = defaultdict(list)
    for db_loading in loadings:
        by_party[db_loading.party_id].append(db_loading)

    bills = []
    for party_id, party_loadings in by_party.items():
        paid = ZERO if party_id is None else _sum_payments(db, tenant_id, kind, party_id, start_date, end_date)
        remaining = remaining_after_payments([loading.grand_total for loading in party_loadings], paid)
        bills.extend(zip((loading.loading_date for loading in party_loadings), remaining))

    totals = ageing_totals(bills, as_of)
    return {
        "side": kind.value,
        "as_of": as_of,
        "buckets": [{"label": label, "amount": round2(totals[label])} for label in AGEING_BUCKETS],
    }


def get_stock_availability(db: Session, tenant_id: str, variety_code: str) -> dict:
    levels = get_stock_levels(db, tenant_id, variety_code)
    return {
        "variety_code": variety_code,
        "incoming": levels.incoming,
        "allocated": levels.allocated,
        "available": levels.available,
    }


def get_dashboard_summary(db: Session, tenant_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
    end_date = end_date or today_ist()
    start_date = start_date or end_date - timedelta(days=DASHBOARD_DEFAULT_DAYS - 1)

    client_loadings = _loadings_query(db, tenant_id, PaymentKind.CLIENT, start_date, end_date)
    sales = as_decimal(client_loadings.with_entities(func.coalesce(func.sum(Loading.grand_total), 0)).scalar())
    client_count = client_loadings.with_entities(func.count(Loading.id)).scalar() or 0
    purchase = as_decimal(
        _loadings_query(db, tenant_id, PaymentKind.VENDOR, start_date, end_date)
        .with_entities(func.coalesce(func.sum(Loading.grand_total), 0))
        .scalar()
    )
    received = _sum_payments(db, tenant_id, PaymentKind.CLIENT, None, start_date, end_date)

    total_kgs = func.sum(LoadingItem.total_kgs)
    top_varieties = (
        db.query(LoadingItem.variety_code, total_kgs)
        .join(Loading, LoadingItem.loading_id == Loading.id)
        .filter(
            Loading.tenant_id == tenant_id,
            Loading.source == LoadingSource.CLIENT,
            Loading.loading_date >= start_date,
            Loading.loading_date <= end_date,
        )
        .group_by(LoadingItem.variety_code)
        .order_by(total_kgs.desc(), LoadingItem.variety_code)
        .limit(TOP_VARIETIES)
        .all()
    )

    ageing = get_ageing_buckets(db, tenant_id, PaymentKind.CLIENT, start_date, end_date)
    logger.debug(f"Dashboard summary computed for tenant {tenant_id} from {start_date} to {end_date}")
    return {
        "start_date": start_date,
        "end_date": end_date,
        "sales": round2(sales),
        "purchase": round2(purchase),
        "client_loadings": client_count,
        "outstanding": outstanding(sales, received),
        "top_varieties": [
            {"variety_code": code, "total_kgs": as_decimal(kgs)} for code, kgs in top_varieties
        ],
        "ageing": ageing["buckets"],
    }
