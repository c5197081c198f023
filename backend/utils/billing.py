"""
Pricing and aggregation rules for loadings.

Everything in here is pure: no session, no I/O. The crud layer reads rows, feeds
them through these helpers and persists what comes back, so the same rule is used
on loading creation, item edits and the explicit recompute action.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from models.loadings import LoadingSource
from utils.exceptions import ValidationError

TRAY_KG = 35

# Commission/handling fee taken on incoming (farmer/agent) items at entry time.
VENDOR_DEDUCTION_PERCENT = Decimal("5")

# Taken on client loadings whose transport is vendor-arranged (no vehicle assigned).
CLIENT_NO_VEHICLE_DEDUCTION_PERCENT = Decimal("5")

MONEY_PLACES = Decimal("0.01")
ZERO = Decimal("0")

AGEING_BUCKETS = ("0-7 days", "8-15 days", "16-30 days", "> 30 days")

# Packing slips default to this rate per ice block when no price is entered.
DEFAULT_ICE_BLOCK_PRICE = Decimal("200")


def to_decimal(value) -> Decimal:
    """Coerce user input to a non-negative Decimal; junk, NaN and negatives become 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip() or "0")
    except (InvalidOperation, ValueError):
        return ZERO
    if not result.is_finite() or result < 0:
        return ZERO
    return result


def as_decimal(value) -> Decimal:
    """Plain conversion for stored and summed values; no clamping."""
    return value if isinstance(value, Decimal) else Decimal(str(value or 0))


def to_tray_count(value) -> int:
    return int(to_decimal(value).to_integral_value(rounding=ROUND_FLOOR))


def round2(value) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def tray_kgs(no_trays) -> Decimal:
    return Decimal(to_tray_count(no_trays) * TRAY_KG)


def _as_source(source) -> LoadingSource:
    return source if isinstance(source, LoadingSource) else LoadingSource(str(source).lower())


def is_vendor_source(source) -> bool:
    return _as_source(source) in (LoadingSource.FARMER, LoadingSource.AGENT)


def _after_deduction(amount: Decimal, percent: Decimal) -> Decimal:
    return amount * (Decimal(100) - percent) / Decimal(100)


@dataclass(frozen=True)
class LineItemTotals:
    no_trays: int
    loose: Decimal
    price_per_kg: Decimal
    tray_kgs: Decimal
    total_kgs: Decimal
    gross: Decimal
    total_price: Decimal


def price_line_item(no_trays, loose, price_per_kg, source) -> LineItemTotals:
    """
    Derive tray weight, total weight and net price for one loading item.

    Farmer and agent items lose VENDOR_DEDUCTION_PERCENT immediately; client items keep
    the gross price here and any deduction is applied on the loading grand total.

    Raises:
        ValidationError: when both trays and loose weight are zero.
    """
    trays = to_tray_count(no_trays)
    loose_kgs = to_decimal(loose)
    price = to_decimal(price_per_kg)
    if trays == 0 and loose_kgs == 0:
        raise ValidationError("Enter trays or loose")

    item_tray_kgs = Decimal(trays * TRAY_KG)
    total_kgs = item_tray_kgs + loose_kgs
    gross = total_kgs * price
    if is_vendor_source(source):
        total_price = round2(_after_deduction(gross, VENDOR_DEDUCTION_PERCENT))
    else:
        total_price = round2(gross)

    return LineItemTotals(
        no_trays=trays,
        loose=loose_kgs,
        price_per_kg=price,
        tray_kgs=item_tray_kgs,
        total_kgs=total_kgs,
        gross=gross,
        total_price=total_price,
    )


@dataclass(frozen=True)
class LoadingTotals:
    total_trays: int = 0
    total_loose_kgs: Decimal = ZERO
    total_tray_kgs: Decimal = ZERO
    total_kgs: Decimal = ZERO
    total_price: Decimal = ZERO


def summarize_items(items: Iterable) -> LoadingTotals:
    """Re-sum the full item set. Never applied as a delta on top of stored totals."""
    trays, loose, item_tray_kgs, kgs, price = 0, ZERO, ZERO, ZERO, ZERO
    for item in items:
        trays += int(item.no_trays or 0)
        loose += as_decimal(item.loose)
        item_tray_kgs += as_decimal(item.tray_kgs)
        kgs += as_decimal(item.total_kgs)
        price += as_decimal(item.total_price)
    return LoadingTotals(
        total_trays=trays,
        total_loose_kgs=loose,
        total_tray_kgs=item_tray_kgs,
        total_kgs=kgs,
        total_price=round2(price),
    )


def has_vehicle(vehicle_id: Optional[str], vehicle_no: Optional[str]) -> bool:
    return bool((vehicle_id or "").strip()) or bool((vehicle_no or "").strip())


def base_amount(source, totals: LoadingTotals, vehicle_assigned: bool) -> Decimal:
    """
    Amount a loading is worth before dispatch and packing charges.

    Farmer/agent: sum of item prices, already net of the vendor deduction.
    Client: total weight, less CLIENT_NO_VEHICLE_DEDUCTION_PERCENT when no vehicle is
    assigned. Item prices on a client bill are recorded but never feed the receivable,
    so a partly priced bill keeps the weight of every item.
    """
    if is_vendor_source(source):
        return round2(totals.total_price)
    basis = as_decimal(totals.total_kgs)
    if not vehicle_assigned:
        basis = _after_deduction(basis, CLIENT_NO_VEHICLE_DEDUCTION_PERCENT)
    return round2(basis)


def grand_total(base: Decimal, dispatch_charges_total=ZERO, packing_amount_total=ZERO) -> Decimal:
    return round2(as_decimal(base) + as_decimal(dispatch_charges_total) + as_decimal(packing_amount_total))


def outstanding(billed, paid) -> Decimal:
    return max(ZERO, round2(as_decimal(billed) - as_decimal(paid)))


def age_in_days(as_of: date, loading_date) -> int:
    if isinstance(loading_date, datetime):
        loading_date = loading_date.date()
    if isinstance(as_of, datetime):
        as_of = as_of.date()
    return (as_of - loading_date).days


def ageing_bucket(age_days: int) -> str:
    if age_days <= 7:
        return AGEING_BUCKETS[0]
    if age_days <= 15:
        return AGEING_BUCKETS[1]
    if age_days <= 30:
        return AGEING_BUCKETS[2]
    return AGEING_BUCKETS[3]


def remaining_after_payments(grand_totals: List[Decimal], paid) -> List[Decimal]:
    """
    Spread one party's payments over its bills in proportion to each bill's grand total.

    Payments are tied to the party, not to a bill, so every bill is settled by the
    same fraction regardless of the order it was raised in.
    """
    billed = sum((as_decimal(g) for g in grand_totals), ZERO)
    if billed <= 0:
        return [max(ZERO, round2(as_decimal(g))) for g in grand_totals]
    ratio = min(Decimal(1), as_decimal(paid) / billed)
    return [max(ZERO, round2(as_decimal(g) * (1 - ratio))) for g in grand_totals]


def ageing_totals(bills: Iterable[Tuple[date, Decimal]], as_of: date) -> Dict[str, Decimal]:
    buckets = {label: ZERO for label in AGEING_BUCKETS}
    for loading_date, remaining in bills:
        if remaining > 0:
            buckets[ageing_bucket(age_in_days(as_of, loading_date))] += remaining
    return buckets
