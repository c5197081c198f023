from pydantic import BaseModel
from typing import List
from datetime import date
from decimal import Decimal


class Outstanding(BaseModel):
    party_id: int
    billed: Decimal
    paid: Decimal
    due: Decimal


class AgeingBucket(BaseModel):
    label: str
    amount: Decimal


class AgeingReport(BaseModel):
    side: str
    as_of: date
    buckets: List[AgeingBucket]


class StockAvailability(BaseModel):
    variety_code: str
    incoming: Decimal
    allocated: Decimal
    available: Decimal


class VarietyKgs(BaseModel):
    variety_code: str
    total_kgs: Decimal


class DashboardSummary(BaseModel):
    start_date: date
    end_date: date
    sales: Decimal
    purchase: Decimal
    client_loadings: int
    outstanding: Decimal
    top_varieties: List[VarietyKgs]
    ageing: List[AgeingBucket]
