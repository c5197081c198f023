from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from database import get_db
from crud import reconciliation as crud
from models.payments import PaymentKind
from schemas.reconciliation import AgeingReport, DashboardSummary, Outstanding, StockAvailability
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/reconciliation", tags=["Reconciliation"])


@router.get("/outstanding/{party_id}", response_model=Outstanding)
def get_outstanding(
    party_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.get_outstanding(db, tenant_id, party_id, start_date, end_date)


@router.get("/ageing", response_model=AgeingReport)
def get_ageing_buckets(
    side: PaymentKind = PaymentKind.CLIENT,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    as_of: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Unpaid balances by age: 0-7, 8-15, 16-30 and more than 30 days."""
    return crud.get_ageing_buckets(db, tenant_id, side, start_date, end_date, as_of)


@router.get("/stock/{variety_code}", response_model=StockAvailability)
def get_stock_availability(variety_code: str, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return crud.get_stock_availability(db, tenant_id, variety_code)


@router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard_summary(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Sales, purchases, outstanding and top varieties; defaults to the last 7 days."""
    return crud.get_dashboard_summary(db, tenant_id, start_date, end_date)
